"""Shared test fixtures and configuration for pytest."""

import json
from typing import Any

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from study_quiz.curriculum.course_data import parse_outline
from study_quiz.curriculum.topic_tree import TopicTree
from study_quiz.models.quiz import (
    Difficulty,
    Question,
    QuizMode,
    QuizResult,
    QuizSettings,
)

SMALL_OUTLINE = """
part-a | Part A
    1 | 1. Alpha
        1.1 | 1.1. Alpha one
        1.2 | 1.2. Alpha two
    2 | 2. Beta
        2.1 | 2.1. Beta one
part-b | Part B
    3 | 3. Gamma
        3.1 | 3.1. Gamma one
        3.2 | 3.2. Gamma two
        3.3 | 3.3. Gamma three
"""


def make_candidate(**overrides: Any) -> dict[str, Any]:
    """A model reply object that satisfies the question contract."""
    candidate = {
        "question": "Which body issues the IFRS Sustainability Disclosure Standards?",
        "options": ["A) ISSB", "B) IASB", "C) GRI", "D) EFRAG"],
        "answer_keys": ["A"],
        "isMultipleChoice": False,
        "explanation": "The ISSB sets the IFRS Sustainability Disclosure Standards.",
    }
    candidate.update(overrides)
    return candidate


@pytest.fixture
def candidate_factory():
    """Build valid reply objects with selected fields replaced."""
    return make_candidate


@pytest.fixture
def small_tree() -> TopicTree:
    """A two-part tree small enough to reason about by hand."""
    return TopicTree(parse_outline(SMALL_OUTLINE))


@pytest.fixture
def valid_reply() -> str:
    """A fenced reply with prose around a valid question."""
    return "Here you go:\n```json\n" + json.dumps(make_candidate()) + "\n```\nGood luck!"


@pytest.fixture
def fake_llm_factory():
    """Build a fake chat model that replies with the given texts in turn."""

    def factory(*responses: str) -> FakeListChatModel:
        return FakeListChatModel(responses=list(responses))

    return factory


@pytest.fixture
def sample_question() -> Question:
    """Create a sample single-answer Question for testing."""
    return Question(
        id=0,
        question="Which body issues the IFRS Sustainability Disclosure Standards?",
        options=["ISSB", "IASB", "GRI", "EFRAG"],
        correct_answer="ISSB",
        difficulty=Difficulty.EASY,
        explanation="The ISSB was created by the IFRS Foundation in 2021.",
        topic="3.1. Gamma one",
    )


@pytest.fixture
def sample_questions() -> list[Question]:
    """Create a list of sample questions for testing."""
    return [
        Question(
            id=0,
            question="What does materiality depend on?",
            options=["Investor decisions", "Company size", "Auditor opinion"],
            correct_answer="Investor decisions",
            topic="1.1. Alpha one",
        ),
        Question(
            id=1,
            question="Which are pillars of climate disclosure?",
            options=["Governance", "Strategy", "Marketing", "Payroll"],
            correct_answer=["Governance", "Strategy"],
            is_multiple_choice=True,
            difficulty=Difficulty.HARD,
            explanation="Governance and strategy are two of the four pillars.",
            topic="1.2. Alpha two",
        ),
        Question(
            id=2,
            question="Who are the primary users of general purpose reports?",
            options=["Investors", "Employees"],
            correct_answer="Investors",
            topic="3.1. Gamma one",
        ),
    ]


@pytest.fixture
def sample_settings() -> QuizSettings:
    """Practice settings over two leaves of the small tree."""
    return QuizSettings(
        topics=["1. Alpha", "1.1. Alpha one", "1.2. Alpha two"],
        difficulty=[Difficulty.EASY, Difficulty.HARD],
        number_of_questions=4,
        mode=QuizMode.PRACTICE,
    )


@pytest.fixture
def sample_results(sample_questions: list[Question]) -> list[QuizResult]:
    """First and last answered correctly, the multiple-choice one missed."""
    first, second, third = sample_questions
    return [
        QuizResult(
            question=first,
            user_answer=["Investor decisions"],
            is_correct=True,
            time_spent_on_question=4.0,
        ),
        QuizResult(
            question=second,
            user_answer=["Governance"],
            is_correct=False,
            time_spent_on_question=9.5,
        ),
        QuizResult(
            question=third,
            user_answer=["Investors"],
            is_correct=True,
            time_spent_on_question=2.0,
        ),
    ]


@pytest.fixture
def bank_document() -> dict[str, Any]:
    """A question-bank file body with one item of every kind."""
    return {
        "items": [
            {
                "id": "q1",
                "type": "single",
                "topics": ["1.1. Alpha one"],
                "stem": "What is sustainability?",
                "options": ["Meeting present needs", "Profit only"],
            },
            {
                "id": "q2",
                "type": "multi",
                "topics": ["3.1. Gamma one"],
                "stem": "Which are ISSB standards?",
                "options": ["IFRS S1", "IFRS S2", "IAS 1"],
            },
            {
                "id": "q3",
                "stem": "Has no answer",
                "options": ["x", "y"],
            },
            {
                "id": 4,
                "stem": "Index out of range",
                "options": ["x", "y"],
            },
        ],
        "answerKey": [
            {"id": "q1", "correctOptionIndices": [0], "explanation": "Brundtland."},
            {"id": "q2", "correctOptionIndices": [0, 1]},
            {"id": "4", "correctOptionIndices": [5]},
        ],
    }
