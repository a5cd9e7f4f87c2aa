"""Pydantic models for curriculum quiz data structures."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Difficulty(str, Enum):
    """Question difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizMode(str, Enum):
    """Run modes offered on the home screen."""

    PRACTICE = "practice"
    TIMED = "timed"
    TIMED_HALF = "timed_half"
    LIGHTNING = "lightning"
    ASSESSMENT = "assessment"

    @property
    def is_simulator(self) -> bool:
        """Timed modes draw from the whole curriculum."""
        return self in (QuizMode.TIMED, QuizMode.TIMED_HALF)


class CourseTopic(BaseModel):
    """A node of the static curriculum tree."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable identifier")
    title: str = Field(..., min_length=1, description="Display title")
    sub_topics: tuple["CourseTopic", ...] = Field(
        default=(),
        description="Child topics; empty for a leaf",
    )

    @property
    def is_leaf(self) -> bool:
        """Only leaves anchor generation requests."""
        return len(self.sub_topics) == 0


class Question(BaseModel):
    """A single quiz question, generated or loaded from a bank."""

    id: int = Field(..., ge=0, description="Identifier unique within a run")
    question: str = Field(..., min_length=1, description="The question text")
    options: list[str] = Field(..., min_length=2, description="Option texts")
    correct_answer: str | list[str] = Field(
        ...,
        description="Correct option text, or texts for multiple-choice questions",
    )
    is_multiple_choice: bool = Field(default=False)
    difficulty: Difficulty = Field(default=Difficulty.MEDIUM)
    explanation: str | None = Field(None, description="Why the answer is correct")
    topic: str = Field(..., min_length=1, description="Curriculum topic title")

    @field_validator("options")
    @classmethod
    def validate_options(cls, v: list[str]) -> list[str]:
        """Ensure no option is blank."""
        for index, option in enumerate(v):
            if not option or not option.strip():
                raise ValueError(f"Option {index} cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_answer_shape(self) -> "Question":
        """Tie the correct answer to the options and the multiple-choice flag."""
        if self.is_multiple_choice:
            answers = (
                self.correct_answer
                if isinstance(self.correct_answer, list)
                else [self.correct_answer]
            )
            if not answers:
                raise ValueError("Multiple-choice questions need at least one answer")
            if len(set(answers)) != len(answers):
                raise ValueError("Correct answers must be distinct")
            self.correct_answer = answers
        else:
            if isinstance(self.correct_answer, list):
                if len(self.correct_answer) != 1:
                    raise ValueError(
                        "Single-answer questions need exactly one correct answer"
                    )
                self.correct_answer = self.correct_answer[0]
            answers = [self.correct_answer]
        missing = [a for a in answers if a not in self.options]
        if missing:
            raise ValueError(f"Correct answer not among options: {missing}")
        return self

    @property
    def correct_answers(self) -> list[str]:
        """Correct answers as a list regardless of question type."""
        if isinstance(self.correct_answer, list):
            return list(self.correct_answer)
        return [self.correct_answer]

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": 0,
                "question": "Which body issues the IFRS Sustainability Disclosure Standards?",
                "options": ["ISSB", "IASB", "GRI", "EFRAG"],
                "correct_answer": "ISSB",
                "is_multiple_choice": False,
                "difficulty": "easy",
                "explanation": "The ISSB was created by the IFRS Foundation in 2021.",
                "topic": "11.1. The structure of the IFRS Foundation",
            }
        }
    }


class QuizSettings(BaseModel):
    """Configuration of a single run."""

    topics: list[str] = Field(default_factory=list)
    difficulty: list[Difficulty] = Field(
        default_factory=lambda: [Difficulty.MEDIUM],
        min_length=1,
    )
    number_of_questions: int = Field(..., gt=0)
    mode: QuizMode = Field(default=QuizMode.PRACTICE)
    lightning_base_time: int = Field(default=60, gt=0, description="Seconds")
    lightning_bonus_time: int = Field(default=4, ge=0, description="Seconds")


class QuizResult(BaseModel):
    """One answered question."""

    model_config = ConfigDict(frozen=True)

    question: Question
    user_answer: list[str]
    is_correct: bool
    time_spent_on_question: float = Field(..., ge=0.0)


class LeanQuizResult(BaseModel):
    """History keeps only whether each answer was right."""

    model_config = ConfigDict(frozen=True)

    is_correct: bool


class QuizHistoryItem(BaseModel):
    """Persisted summary of a completed run."""

    model_config = ConfigDict(frozen=True)

    settings: QuizSettings
    results: list[LeanQuizResult] = Field(default_factory=list)
    date: str = Field(default_factory=lambda: datetime.now().isoformat())
    time_taken: float | None = None

    @property
    def correct_count(self) -> int:
        return sum(1 for r in self.results if r.is_correct)

    @property
    def score_percentage(self) -> int:
        if not self.results:
            return 0
        return round_half_up(self.correct_count / len(self.results) * 100)


class GenerationRequest(BaseModel):
    """Logical contract of one call to the text-generation service."""

    topic: str = Field(..., min_length=1)
    difficulty: Difficulty = Field(default=Difficulty.MEDIUM)
    count: int = Field(default=1, ge=1, le=10)
    align_with_exam: bool = Field(default=True)
    examples: list[Question] = Field(default_factory=list)


class GeneratedQuestion(BaseModel):
    """A model-produced candidate that passed the contract checks."""

    model_config = ConfigDict(populate_by_name=True)

    question: str
    options: list[str]
    answer_keys: list[str]
    is_multiple_choice: bool = Field(default=False, alias="isMultipleChoice")
    explanation: str | None = None


# Question-bank file format


class LoadedItem(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    type: str = "single"
    topics: list[str] = Field(default_factory=list)
    stem: str
    options: list[str]


class LoadedAnswer(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    correct_option_indices: list[int] = Field(..., alias="correctOptionIndices")
    explanation: str | None = None


class LoadedQuiz(BaseModel):
    items: list[LoadedItem]
    answer_key: list[LoadedAnswer] = Field(..., alias="answerKey")


# Results analysis


class TopicStats(BaseModel):
    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0


class PerformanceReport(BaseModel):
    """Summary shown on the results screen."""

    correct_count: int
    total_count: int
    percentage: int
    topic_stats: dict[str, TopicStats]
    weak_topics: list[str]
    question_type_stats: dict[str, TopicStats]
    feedback: str


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


class GenerationSlot(BaseModel):
    """One planned request of a generation batch."""

    slot_number: int = Field(..., ge=1)
    topic: str = Field(..., min_length=1)
    count: int = Field(..., ge=1)
    difficulty: Difficulty
