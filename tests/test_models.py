"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from study_quiz.models.errors import (
    InsufficientPoolError,
    MalformedQuestion,
    MalformedResponse,
    QuizError,
)
from study_quiz.models.quiz import (
    Difficulty,
    LeanQuizResult,
    LoadedQuiz,
    Question,
    QuizHistoryItem,
    QuizMode,
    QuizSettings,
    round_half_up,
)


class TestQuestion:
    """Test Question model."""

    def test_create_valid_question(self, sample_question: Question):
        """Test creating a valid question."""
        assert sample_question.correct_answer == "ISSB"
        assert sample_question.correct_answers == ["ISSB"]
        assert sample_question.difficulty == Difficulty.EASY
        assert sample_question.is_multiple_choice is False

    def test_single_answer_list_collapses_to_text(self):
        """Test that a one-item answer list becomes a plain string."""
        question = Question(
            id=1, question="Q?", options=["a", "b"], correct_answer=["b"], topic="T"
        )

        assert question.correct_answer == "b"

    def test_multiple_choice_answer_becomes_list(self):
        """Test that a multiple-choice answer is always a list."""
        question = Question(
            id=1,
            question="Q?",
            options=["a", "b", "c"],
            correct_answer="a",
            is_multiple_choice=True,
            topic="T",
        )

        assert question.correct_answer == ["a"]

    def test_answer_must_be_an_option(self):
        """Test that correct answers must come from the options."""
        with pytest.raises(ValidationError):
            Question(id=0, question="Q?", options=["a", "b"], correct_answer="c", topic="T")

    def test_single_answer_rejects_two_answers(self):
        """Test that a single-answer question cannot have two answers."""
        with pytest.raises(ValidationError):
            Question(
                id=0, question="Q?", options=["a", "b"], correct_answer=["a", "b"], topic="T"
            )

    def test_requires_two_options(self):
        """Test that a question needs at least two options."""
        with pytest.raises(ValidationError):
            Question(id=0, question="Q?", options=["a"], correct_answer="a", topic="T")

    def test_rejects_blank_option(self):
        """Test that options cannot be blank."""
        with pytest.raises(ValidationError):
            Question(id=0, question="Q?", options=["a", "  "], correct_answer="a", topic="T")

    def test_rejects_duplicate_answers(self):
        """Test that multiple-choice answers must be distinct."""
        with pytest.raises(ValidationError):
            Question(
                id=0,
                question="Q?",
                options=["a", "b"],
                correct_answer=["a", "a"],
                is_multiple_choice=True,
                topic="T",
            )


class TestQuizSettings:
    """Test QuizSettings model."""

    def test_defaults(self):
        """Test default mode, difficulty and lightning times."""
        settings = QuizSettings(number_of_questions=5)

        assert settings.mode is QuizMode.PRACTICE
        assert settings.difficulty == [Difficulty.MEDIUM]
        assert settings.lightning_base_time == 60
        assert settings.lightning_bonus_time == 4

    def test_requires_positive_question_count(self):
        """Test that number_of_questions must be positive."""
        with pytest.raises(ValidationError):
            QuizSettings(number_of_questions=0)

    def test_requires_a_difficulty(self):
        """Test that the difficulty list cannot be empty."""
        with pytest.raises(ValidationError):
            QuizSettings(number_of_questions=5, difficulty=[])

    def test_simulator_modes(self):
        """Test that only the timed modes are simulators."""
        assert QuizMode.TIMED.is_simulator
        assert QuizMode.TIMED_HALF.is_simulator
        assert not QuizMode.LIGHTNING.is_simulator
        assert not QuizMode.ASSESSMENT.is_simulator


class TestQuizHistoryItem:
    """Test QuizHistoryItem model."""

    def test_score_percentage_rounds_half_up(self):
        """Test that 1 of 8 correct rounds 12.5% up to 13%."""
        results = [LeanQuizResult(is_correct=i == 0) for i in range(8)]
        item = QuizHistoryItem(settings=QuizSettings(number_of_questions=8), results=results)

        assert item.correct_count == 1
        assert item.score_percentage == 13

    def test_empty_results_score_zero(self):
        """Test that a run with no answers scores zero."""
        item = QuizHistoryItem(settings=QuizSettings(number_of_questions=3))

        assert item.score_percentage == 0

    def test_date_defaults_to_iso_string(self):
        """Test that the date is recorded as an ISO timestamp."""
        item = QuizHistoryItem(settings=QuizSettings(number_of_questions=3))

        assert "T" in item.date


class TestLoadedQuiz:
    """Test the question-bank file models."""

    def test_parses_camel_case_keys_and_numeric_ids(self):
        """Test aliases and id coercion."""
        bank = LoadedQuiz.model_validate(
            {
                "items": [{"id": 7, "stem": "Q?", "options": ["a", "b"]}],
                "answerKey": [{"id": 7, "correctOptionIndices": [1]}],
            }
        )

        assert bank.items[0].id == "7"
        assert bank.items[0].type == "single"
        assert bank.answer_key[0].correct_option_indices == [1]


class TestErrors:
    """Test the error taxonomy messages."""

    def test_malformed_response_keeps_snippet(self):
        """Test that the snippet is kept for diagnostics."""
        error = MalformedResponse("invalid JSON", "not json")

        assert isinstance(error, QuizError)
        assert error.snippet == "not json"
        assert "not valid JSON" in str(error)

    def test_malformed_question_reason(self):
        """Test that the violated rule is named."""
        error = MalformedQuestion("options must be a list")

        assert str(error) == "AI returned a malformed question: options must be a list"

    def test_insufficient_pool_counts(self):
        """Test that both counts are reported."""
        error = InsufficientPoolError(have=12, need=40)

        assert error.have == 12
        assert "12" in str(error) and "40" in str(error)


class TestRoundHalfUp:
    """Test the rounding helper."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (5.25, 5), (0.0, 0)],
    )
    def test_rounds_halves_up(self, value, expected):
        """Test that halves always round up."""
        assert round_half_up(value) == expected
