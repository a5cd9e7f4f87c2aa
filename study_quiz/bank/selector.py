"""Part-weighted sampling of assessment questions from a loaded bank."""

import random
from collections.abc import Callable, Mapping, Sequence

import structlog

from study_quiz.config.settings import Settings, get_settings
from study_quiz.curriculum.topic_tree import TopicTree, get_curriculum_tree
from study_quiz.models.errors import InsufficientPoolError
from study_quiz.models.quiz import (
    Difficulty,
    Question,
    QuizMode,
    QuizSettings,
    round_half_up,
)

logger = structlog.get_logger(__name__)

ASSESSMENT_TOPIC_LABEL = "Assessment Mix"


def part_quotas(target: int, distribution: Mapping[str, float]) -> dict[str, int]:
    """Per-part question counts, each rounded to the nearest integer."""
    return {part: round_half_up(target * share) for part, share in distribution.items()}


def select_assessment(
    pool: Sequence[Question],
    target: int,
    distribution: Mapping[str, float],
    part_of: Callable[[str], str | None],
    rng: random.Random | None = None,
) -> list[Question]:
    """
    Sample a part-weighted assessment from a question pool.

    Each part contributes its rounded share of the target, or everything it
    has when short. Rounding surplus is trimmed at random; shortfalls are
    backfilled at random from the rest of the pool. Questions are tracked by
    pool position, so identical questions are still distinct entries.

    Args:
        pool: Candidate questions
        target: Desired number of questions
        distribution: Share of the target per part id
        part_of: Maps a question topic to its part id (None if unknown)
        rng: Random source

    Returns:
        min(target, len(pool)) questions in random order
    """
    rng = rng or random.Random()

    by_part: dict[str, list[int]] = {part: [] for part in distribution}
    for index, question in enumerate(pool):
        part = part_of(question.topic)
        if part in by_part:
            by_part[part].append(index)

    selected: list[int] = []
    for part, quota in part_quotas(target, distribution).items():
        available = by_part[part]
        if len(available) < quota:
            logger.warning(
                "assessment_part_shortfall",
                part=part,
                have=len(available),
                need=quota,
            )
            selected.extend(available)
        else:
            selected.extend(rng.sample(available, quota))

    if len(selected) > target:
        selected = rng.sample(selected, target)
    elif len(selected) < target:
        chosen = set(selected)
        remaining = [i for i in range(len(pool)) if i not in chosen]
        needed = min(target - len(selected), len(remaining))
        selected.extend(rng.sample(remaining, needed))

    rng.shuffle(selected)
    return [pool[i] for i in selected]


def build_assessment(
    pool: Sequence[Question],
    tree: TopicTree | None = None,
    config: Settings | None = None,
    rng: random.Random | None = None,
) -> tuple[QuizSettings, list[Question]]:
    """
    Prepare an assessment run from a loaded pool.

    Args:
        pool: Questions loaded from the bank files
        tree: Curriculum tree used to map topics to parts
        config: Application settings holding the size and distribution
        rng: Random source

    Returns:
        Tuple of (settings, questions renumbered from 0)

    Raises:
        InsufficientPoolError: if the pool is smaller than the assessment
    """
    tree = tree or get_curriculum_tree()
    config = config or get_settings()
    target = config.assessment_question_count

    if len(pool) < target:
        raise InsufficientPoolError(have=len(pool), need=target)

    selected = select_assessment(
        pool, target, config.assessment_distribution, tree.part_of, rng
    )
    questions = [q.model_copy(update={"id": i}) for i, q in enumerate(selected)]

    settings = QuizSettings(
        topics=[ASSESSMENT_TOPIC_LABEL],
        difficulty=[Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD],
        number_of_questions=len(questions),
        mode=QuizMode.ASSESSMENT,
    )
    return settings, questions
