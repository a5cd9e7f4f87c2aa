"""Data models for curriculum quizzes."""

from .errors import (
    GenerationError,
    InsufficientPoolError,
    MalformedBankFile,
    MalformedQuestion,
    MalformedResponse,
    QuizError,
    QuizValidationError,
)
from .quiz import (
    CourseTopic,
    Difficulty,
    GeneratedQuestion,
    GenerationRequest,
    GenerationSlot,
    LeanQuizResult,
    LoadedQuiz,
    PerformanceReport,
    Question,
    QuizHistoryItem,
    QuizMode,
    QuizResult,
    QuizSettings,
    TopicStats,
)

__all__ = [
    "CourseTopic",
    "Difficulty",
    "GeneratedQuestion",
    "GenerationRequest",
    "GenerationSlot",
    "LeanQuizResult",
    "LoadedQuiz",
    "PerformanceReport",
    "Question",
    "QuizHistoryItem",
    "QuizMode",
    "QuizResult",
    "QuizSettings",
    "TopicStats",
    "QuizError",
    "MalformedResponse",
    "MalformedQuestion",
    "InsufficientPoolError",
    "QuizValidationError",
    "MalformedBankFile",
    "GenerationError",
]
