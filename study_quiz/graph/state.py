"""Quiz session state and generation workflow state."""

from datetime import datetime
from typing import TypedDict

from study_quiz.config.settings import get_settings
from study_quiz.models.quiz import (
    GenerationSlot,
    LeanQuizResult,
    Question,
    QuizHistoryItem,
    QuizMode,
    QuizResult,
    QuizSettings,
)


class QuizState(TypedDict):
    """State of the active run, owned by a single UI session."""

    settings: QuizSettings | None
    questions: list[Question]
    results: list[QuizResult]
    is_loading: bool
    error: str | None
    time_taken: float | None
    reviewed_questions: set[int]


class GenerationState(TypedDict):
    """State passed between the generation workflow nodes."""

    settings: QuizSettings
    slots: list[GenerationSlot]
    next_slot: int
    questions: list[Question]
    errors: list[str]
    align_with_exam: bool
    examples: list[Question]


def create_initial_state() -> QuizState:
    """
    Create an empty session state.

    Returns:
        QuizState with no run loaded
    """
    return QuizState(
        settings=None,
        questions=[],
        results=[],
        is_loading=False,
        error=None,
        time_taken=None,
        reviewed_questions=set(),
    )


def start_quiz(
    state: QuizState, settings: QuizSettings, questions: list[Question]
) -> QuizState:
    """Load a new run, discarding any previous answers."""
    state["settings"] = settings
    state["questions"] = list(questions)
    state["results"] = []
    state["error"] = None
    state["time_taken"] = None
    state["reviewed_questions"] = set()
    return state


def reset_quiz(state: QuizState) -> QuizState:
    """Return the session to its empty state."""
    state.update(create_initial_state())
    return state


def is_answer_correct(question: Question, user_answer: list[str]) -> bool:
    """Exact, order-insensitive match of the answer set."""
    return sorted(question.correct_answers) == sorted(user_answer)


def submit_answer(
    state: QuizState,
    question: Question,
    user_answer: list[str],
    time_spent_on_question: float,
) -> QuizResult:
    """
    Record an answer for the active run.

    Returns:
        The appended QuizResult
    """
    result = QuizResult(
        question=question,
        user_answer=list(user_answer),
        is_correct=is_answer_correct(question, user_answer),
        time_spent_on_question=max(0.0, time_spent_on_question),
    )
    state["results"].append(result)
    return result


def end_quiz(state: QuizState, time_in_seconds: float | None = None) -> QuizState:
    state["time_taken"] = time_in_seconds
    return state


def toggle_review_question(state: QuizState, question_id: int) -> QuizState:
    """Flag or unflag a question for later review."""
    reviewed = set(state["reviewed_questions"])
    if question_id in reviewed:
        reviewed.discard(question_id)
    else:
        reviewed.add(question_id)
    state["reviewed_questions"] = reviewed
    return state


def to_history_item(state: QuizState, date: datetime | None = None) -> QuizHistoryItem:
    """
    Summarize the finished run for the history store.

    Raises:
        ValueError: if no run is loaded
    """
    if state["settings"] is None:
        raise ValueError("No quiz run to summarize")
    return QuizHistoryItem(
        settings=state["settings"],
        results=[LeanQuizResult(is_correct=r.is_correct) for r in state["results"]],
        date=(date or datetime.now()).isoformat(),
        time_taken=state["time_taken"],
    )


def time_limit(settings: QuizSettings, question_count: int) -> int | None:
    """
    Countdown for a run in seconds, or None for untimed modes.

    Timed modes allow a fixed time per question; lightning starts from its
    base time and earns a bonus per answer.
    """
    if settings.mode.is_simulator:
        return question_count * get_settings().seconds_per_timed_question
    if settings.mode is QuizMode.LIGHTNING:
        return settings.lightning_base_time
    return None


def lightning_bonus(settings: QuizSettings) -> int:
    """Seconds added to the countdown after each lightning answer."""
    if settings.mode is QuizMode.LIGHTNING:
        return settings.lightning_bonus_time
    return 0


def create_generation_state(
    settings: QuizSettings,
    align_with_exam: bool = True,
    examples: list[Question] | None = None,
) -> GenerationState:
    """Initial state for the generation workflow."""
    return GenerationState(
        settings=settings,
        slots=[],
        next_slot=0,
        questions=[],
        errors=[],
        align_with_exam=align_with_exam,
        examples=list(examples or []),
    )
