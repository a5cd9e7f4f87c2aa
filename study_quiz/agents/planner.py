"""Planner Agent - Turns run settings into a sequence of generation slots."""

import math
import random
from collections.abc import Iterable

from study_quiz.config.settings import Settings, get_settings
from study_quiz.curriculum.topic_tree import TopicTree, get_curriculum_tree
from study_quiz.models.errors import QuizValidationError
from study_quiz.models.quiz import Difficulty, GenerationSlot, QuizMode, QuizSettings

# Keeps each model reply short enough to parse reliably
MAX_QUESTIONS_PER_REQUEST = 5
REVIEW_QUESTION_COUNT = 10
ALL_DIFFICULTIES = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]


def effective_settings(
    settings: QuizSettings,
    tree: TopicTree | None = None,
    config: Settings | None = None,
) -> QuizSettings:
    """
    Apply the fixed shape of the simulator and assessment modes.

    Args:
        settings: Settings chosen by the user
        tree: Curriculum tree (defaults to the built-in curriculum)
        config: Application settings holding the per-mode counts

    Returns:
        Settings the run will actually use
    """
    tree = tree or get_curriculum_tree()
    config = config or get_settings()

    if settings.mode is QuizMode.TIMED:
        count = config.timed_question_count
    elif settings.mode is QuizMode.TIMED_HALF:
        count = config.half_timed_question_count
    elif settings.mode is QuizMode.ASSESSMENT:
        return settings.model_copy(
            update={
                "topics": [],
                "difficulty": list(ALL_DIFFICULTIES),
                "number_of_questions": config.assessment_question_count,
            }
        )
    else:
        return settings

    return settings.model_copy(
        update={
            "topics": tree.all_titles(),
            "difficulty": list(ALL_DIFFICULTIES),
            "number_of_questions": count,
        }
    )


def plan_generation(
    settings: QuizSettings,
    tree: TopicTree | None = None,
    rng: random.Random | None = None,
) -> list[GenerationSlot]:
    """
    Planner Agent: spread the requested questions over the selected leaves.

    Every leaf gets ceil(n / leaves) questions until n is covered, so with
    more leaves than questions only the first n leaves are used. Simulator
    modes shuffle the leaves first to vary the coverage between runs.

    Args:
        settings: Effective run settings
        tree: Curriculum tree (defaults to the built-in curriculum)
        rng: Random source for shuffling and difficulty choice

    Returns:
        Ordered generation slots

    Raises:
        QuizValidationError: if no leaf topic is selected
    """
    tree = tree or get_curriculum_tree()
    rng = rng or random.Random()

    leaves = tree.leaf_filter(settings.topics)
    if not leaves:
        raise QuizValidationError(
            "Please select at least one specific sub-topic to generate questions."
        )
    if settings.mode.is_simulator:
        rng.shuffle(leaves)

    per_topic = math.ceil(settings.number_of_questions / len(leaves))
    remaining = settings.number_of_questions
    slots: list[GenerationSlot] = []

    for topic in leaves:
        if remaining <= 0:
            break
        topic_count = min(per_topic, remaining)
        remaining -= topic_count
        while topic_count > 0:
            count = min(topic_count, MAX_QUESTIONS_PER_REQUEST)
            slots.append(
                GenerationSlot(
                    slot_number=len(slots) + 1,
                    topic=topic,
                    count=count,
                    difficulty=rng.choice(settings.difficulty),
                )
            )
            topic_count -= count

    return slots


def review_settings(
    weak_topics: Iterable[str], tree: TopicTree | None = None
) -> QuizSettings:
    """
    Build practice settings focused on the weak topics of a previous run.

    Args:
        weak_topics: Topic titles from the results analysis
        tree: Curriculum tree (defaults to the built-in curriculum)

    Returns:
        Practice settings over the weak topics and their descendants

    Raises:
        QuizValidationError: if there are no weak topics
    """
    tree = tree or get_curriculum_tree()
    topics = tree.expand_weak_topics(weak_topics)
    if not topics:
        raise QuizValidationError("There are no weak topics to review.")

    leaf_count = len(tree.leaf_filter(topics))
    return QuizSettings(
        topics=topics,
        difficulty=list(ALL_DIFFICULTIES),
        number_of_questions=min(REVIEW_QUESTION_COUNT, leaf_count or REVIEW_QUESTION_COUNT),
        mode=QuizMode.PRACTICE,
    )


def toggle_difficulty(
    current: list[Difficulty], difficulty: Difficulty, checked: bool
) -> list[Difficulty]:
    """
    Add or remove a difficulty level, keeping at least one selected.

    Returns:
        The new list in easy/medium/hard order, or the current one if the
        change would leave it empty
    """
    chosen = set(current)
    if checked:
        chosen.add(difficulty)
    else:
        chosen.discard(difficulty)
    if not chosen:
        return list(current)
    return [d for d in ALL_DIFFICULTIES if d in chosen]
