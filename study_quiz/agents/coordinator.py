"""Results Coordinator - Summarizes a finished run for review."""

from study_quiz.models.quiz import (
    PerformanceReport,
    QuizMode,
    QuizResult,
    TopicStats,
    round_half_up,
)

MODE_TITLES = {
    QuizMode.PRACTICE: "Practice",
    QuizMode.TIMED: "Full Simulator",
    QuizMode.TIMED_HALF: "1/2 Simulator",
    QuizMode.LIGHTNING: "Lightning Quiz",
    QuizMode.ASSESSMENT: "Assessment",
}

FEEDBACK_BANDS = [
    (90, "Excellent! You have mastered the subject!"),
    (70, "Very good! Keep practicing."),
    (50, "Good effort. Review the questions to improve."),
    (0, "Don't be discouraged! Review is the key to success."),
]


def analyze_results(
    results: list[QuizResult], total_questions: int | None = None
) -> PerformanceReport:
    """
    Build the performance report shown after a run.

    Args:
        results: Answered questions in order
        total_questions: Questions in the run (defaults to the answered count,
            so unanswered questions of a timed-out run count as misses)

    Returns:
        PerformanceReport with per-topic and per-type statistics
    """
    topic_stats = organize_results_by_topic(results)

    weak_topics = sorted(
        (topic for topic, stats in topic_stats.items() if stats.correct < stats.total),
        key=lambda topic: topic_stats[topic].accuracy,
    )

    type_stats = {"single": TopicStats(), "multiple": TopicStats()}
    for result in results:
        stats = type_stats["multiple" if result.question.is_multiple_choice else "single"]
        stats.total += 1
        if result.is_correct:
            stats.correct += 1

    correct_count = sum(1 for r in results if r.is_correct)
    total_count = total_questions if total_questions is not None else len(results)
    percentage = round_half_up(correct_count / total_count * 100) if total_count else 0

    return PerformanceReport(
        correct_count=correct_count,
        total_count=total_count,
        percentage=percentage,
        topic_stats=topic_stats,
        weak_topics=weak_topics,
        question_type_stats=type_stats,
        feedback=feedback_for(percentage),
    )


def organize_results_by_topic(results: list[QuizResult]) -> dict[str, TopicStats]:
    """
    Count correct and total answers per topic.

    Args:
        results: Answered questions

    Returns:
        Dictionary mapping topics to their stats, in first-seen order
    """
    topic_map: dict[str, TopicStats] = {}
    for result in results:
        topic = result.question.topic or "Uncategorized"
        stats = topic_map.setdefault(topic, TopicStats())
        stats.total += 1
        if result.is_correct:
            stats.correct += 1
    return topic_map


def feedback_for(percentage: int) -> str:
    for threshold, message in FEEDBACK_BANDS:
        if percentage >= threshold:
            return message
    return FEEDBACK_BANDS[-1][1]


def mode_title(mode: QuizMode) -> str:
    return MODE_TITLES.get(mode, mode.value.title())
