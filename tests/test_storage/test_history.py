"""Tests for history persistence."""

import json

import pytest

from study_quiz.models.quiz import LeanQuizResult, QuizHistoryItem, QuizSettings
from study_quiz.storage.history import MAX_HISTORY_ITEMS, HistoryStore


def make_item(number: int, correct: int = 1, total: int = 2) -> QuizHistoryItem:
    return QuizHistoryItem(
        settings=QuizSettings(topics=[f"Topic {number}"], number_of_questions=total),
        results=[LeanQuizResult(is_correct=i < correct) for i in range(total)],
        date=f"2026-01-01T00:00:{number % 60:02d}",
    )


@pytest.fixture
def store(tmp_path) -> HistoryStore:
    return HistoryStore(tmp_path / "nested" / "history.json")


class TestLoad:
    """Test reading the history file."""

    def test_missing_file_is_empty(self, store: HistoryStore):
        """Test that no file means no history."""
        assert store.load() == []

    def test_malformed_file_is_wiped(self, store: HistoryStore):
        """Test that an unreadable file is deleted."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json", encoding="utf-8")

        assert store.load() == []
        assert not store.path.exists()

    def test_wrong_shape_is_wiped(self, store: HistoryStore):
        """Test that a non-list document is deleted."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({"items": []}), encoding="utf-8")

        assert store.load() == []
        assert not store.path.exists()

    @pytest.mark.parametrize("entry", [None, 1, "x", ["settings"]])
    def test_non_object_entry_is_wiped(self, store: HistoryStore, entry):
        """Test that a list holding a non-object entry is deleted."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps([entry]), encoding="utf-8")

        assert store.load() == []
        assert not store.path.exists()

    def test_save_recovers_from_non_object_entry(self, store: HistoryStore):
        """Test that saving over a corrupt file starts a fresh history."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text("[null]", encoding="utf-8")

        history = store.save(make_item(1))

        assert len(history) == 1
        assert len(store.load()) == 1

    def test_migrates_bloated_entries(self, store: HistoryStore, sample_question):
        """Test that results carrying full questions are slimmed and re-saved."""
        legacy = [
            {
                "settings": {"topics": ["T"], "number_of_questions": 1},
                "results": [
                    {
                        "question": sample_question.model_dump(mode="json"),
                        "user_answer": ["ISSB"],
                        "is_correct": True,
                        "time_spent_on_question": 3.0,
                    }
                ],
                "date": "2025-12-31T10:00:00",
                "time_taken": 3.0,
            }
        ]
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps(legacy), encoding="utf-8")

        (item,) = store.load()

        assert item.results == [LeanQuizResult(is_correct=True)]
        saved = json.loads(store.path.read_text(encoding="utf-8"))
        assert saved[0]["results"] == [{"is_correct": True}]


class TestSave:
    """Test appending runs."""

    def test_most_recent_first(self, store: HistoryStore):
        """Test that new runs are prepended."""
        store.save(make_item(1))
        store.save(make_item(2))

        assert [i.settings.topics[0] for i in store.load()] == ["Topic 2", "Topic 1"]

    def test_caps_at_max_items(self, store: HistoryStore):
        """Test that saving one past the cap evicts the oldest run."""
        for number in range(MAX_HISTORY_ITEMS + 1):
            store.save(make_item(number))

        history = store.load()

        assert len(history) == MAX_HISTORY_ITEMS
        assert history[0].settings.topics == [f"Topic {MAX_HISTORY_ITEMS}"]
        assert history[-1].settings.topics == ["Topic 1"]

    def test_custom_cap(self, tmp_path):
        """Test that the cap is configurable."""
        store = HistoryStore(tmp_path / "history.json", max_items=2)
        for number in range(3):
            store.save(make_item(number))

        assert len(store.load()) == 2

    def test_round_trips_scores(self, store: HistoryStore):
        """Test that correctness survives a save and load."""
        store.save(make_item(1, correct=1, total=4))

        (item,) = store.load()

        assert item.score_percentage == 25

    def test_write_failure_is_logged_not_raised(self, tmp_path):
        """Test that an unwritable location does not break the run."""
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = HistoryStore(blocker / "history.json")

        history = store.save(make_item(1))

        assert len(history) == 1
        assert not (blocker / "history.json").exists()


class TestDeleteAndClear:
    """Test removing runs."""

    def test_delete_by_position(self, store: HistoryStore):
        """Test that one run is removed."""
        for number in range(3):
            store.save(make_item(number))

        store.delete(1)

        assert [i.settings.topics[0] for i in store.load()] == ["Topic 2", "Topic 0"]

    def test_delete_out_of_range(self, store: HistoryStore):
        """Test that an unknown position raises."""
        store.save(make_item(1))

        with pytest.raises(IndexError):
            store.delete(5)

    def test_clear(self, store: HistoryStore):
        """Test that clearing removes the file."""
        store.save(make_item(1))

        store.clear()

        assert store.load() == []
        assert not store.path.exists()
