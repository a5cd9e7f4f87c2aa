"""Tests for question-bank loading."""

import json

import pytest

from study_quiz.bank.loader import (
    DEFAULT_TOPIC,
    load_question_banks,
    parse_question_bank,
    practice_settings_for,
)
from study_quiz.models.errors import InsufficientPoolError, MalformedBankFile
from study_quiz.models.quiz import QuizMode


class TestParseQuestionBank:
    """Test parsing a single bank document."""

    def test_keeps_answered_items(self, bank_document):
        """Test that only items with a usable answer survive."""
        questions = parse_question_bank(json.dumps(bank_document))

        assert [q.question for q in questions] == [
            "What is sustainability?",
            "Which are ISSB standards?",
        ]

    def test_maps_answers_to_option_texts(self, bank_document):
        """Test single and multi answers."""
        single, multi = parse_question_bank(json.dumps(bank_document))

        assert single.correct_answer == "Meeting present needs"
        assert single.explanation == "Brundtland."
        assert single.topic == "1.1. Alpha one"
        assert multi.is_multiple_choice
        assert multi.correct_answer == ["IFRS S1", "IFRS S2"]

    def test_assigns_contiguous_ids(self, bank_document):
        """Test that ids start from the given offset without gaps."""
        questions = parse_question_bank(json.dumps(bank_document), start_id=10)

        assert [q.id for q in questions] == [10, 11]

    def test_accepts_double_stringified_json(self, bank_document):
        """Test that a JSON string holding the document is decoded."""
        text = json.dumps(json.dumps(bank_document))

        assert len(parse_question_bank(text)) == 2

    def test_defaults_topic(self):
        """Test that items without topics are uncategorized."""
        document = {
            "items": [{"id": "a", "stem": "Q?", "options": ["x", "y"]}],
            "answerKey": [{"id": "a", "correctOptionIndices": [1]}],
        }

        (question,) = parse_question_bank(json.dumps(document))

        assert question.topic == DEFAULT_TOPIC
        assert question.correct_answer == "y"

    def test_rejects_invalid_json(self):
        """Test that unreadable text is reported."""
        with pytest.raises(MalformedBankFile, match="Invalid JSON"):
            parse_question_bank("{oops")

    def test_requires_items_and_answer_key(self):
        """Test that both sections are required."""
        with pytest.raises(MalformedBankFile, match="'items' and 'answerKey'"):
            parse_question_bank(json.dumps({"items": []}))

    def test_rejects_wrong_shapes(self):
        """Test that items of the wrong shape are reported."""
        with pytest.raises(MalformedBankFile, match="Invalid question bank"):
            parse_question_bank(json.dumps({"items": [{"id": "a"}], "answerKey": []}))


class TestLoadQuestionBanks:
    """Test loading several files."""

    def test_merges_files_with_unique_ids(self, tmp_path, bank_document):
        """Test that ids continue across files."""
        first = tmp_path / "first.json"
        second = tmp_path / "second.json"
        first.write_text(json.dumps(bank_document), encoding="utf-8")
        second.write_text(json.dumps(bank_document), encoding="utf-8")

        questions = load_question_banks([first, second])

        assert [q.id for q in questions] == [0, 1, 2, 3]

    def test_names_the_failing_file(self, tmp_path, bank_document):
        """Test that errors say which file failed."""
        good = tmp_path / "good.json"
        bad = tmp_path / "bad.json"
        good.write_text(json.dumps(bank_document), encoding="utf-8")
        bad.write_text("not json", encoding="utf-8")

        with pytest.raises(MalformedBankFile, match="file #2"):
            load_question_banks([good, bad])

    def test_missing_file(self, tmp_path):
        """Test that a missing file is reported as a bank error."""
        with pytest.raises(MalformedBankFile, match="file #1"):
            load_question_banks([tmp_path / "missing.json"])

    def test_empty_pool_raises(self, tmp_path):
        """Test that files without usable questions are rejected."""
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"items": [], "answerKey": []}), encoding="utf-8")

        with pytest.raises(InsufficientPoolError):
            load_question_banks([path])


class TestPracticeSettingsFor:
    """Test settings for practicing a loaded pool."""

    def test_covers_every_question(self, sample_questions):
        """Test the count, mode and distinct topics."""
        settings = practice_settings_for(sample_questions)

        assert settings.number_of_questions == 3
        assert settings.mode is QuizMode.PRACTICE
        assert settings.topics == ["1.1. Alpha one", "1.2. Alpha two", "3.1. Gamma one"]
