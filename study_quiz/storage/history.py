"""Durable, bounded history of completed runs."""

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from study_quiz.models.quiz import LeanQuizResult, QuizHistoryItem

logger = structlog.get_logger(__name__)

MAX_HISTORY_ITEMS = 50


class HistoryStore:
    """
    JSON file holding run summaries, most recent first.

    Results are stored lean (correctness only). Older files that still carry
    full questions are migrated on load; unreadable files are wiped.
    """

    def __init__(self, path: str | Path, max_items: int = MAX_HISTORY_ITEMS):
        self.path = Path(path)
        self.max_items = max_items

    def load(self) -> list[QuizHistoryItem]:
        """
        Read the stored history.

        Returns:
            History items, most recent first; empty if missing or unreadable
        """
        if not self.path.exists():
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise ValueError("history root is not a list")
            needs_resave = any(self._is_bloated(entry) for entry in raw)
            history = [self._lean(entry) for entry in raw][: self.max_items]
        except (OSError, ValueError, TypeError, KeyError, ValidationError) as e:
            logger.error("history_load_failed", path=str(self.path), error=str(e))
            self._remove_file()
            return []

        if needs_resave or len(raw) > len(history):
            self._write(history)
        return history

    def save(self, item: QuizHistoryItem) -> list[QuizHistoryItem]:
        """
        Prepend a run and evict the oldest beyond the cap.

        Returns:
            The updated history
        """
        history = [item, *self.load()][: self.max_items]
        self._write(history)
        return history

    def delete(self, index: int) -> list[QuizHistoryItem]:
        """
        Remove one run by its position (0 is the most recent).

        Raises:
            IndexError: if there is no run at that position
        """
        history = self.load()
        if not 0 <= index < len(history):
            raise IndexError(f"No history entry at position {index}")
        del history[index]
        self._write(history)
        return history

    def clear(self) -> None:
        """Delete the whole history."""
        self._remove_file()

    @staticmethod
    def _is_bloated(entry: Any) -> bool:
        results = entry.get("results") if isinstance(entry, dict) else None
        return bool(results) and isinstance(results[0], dict) and "question" in results[0]

    @staticmethod
    def _lean(entry: Any) -> QuizHistoryItem:
        if not isinstance(entry, dict):
            raise ValueError(f"history entry is not an object: {entry!r}")
        results = entry.get("results") or []
        return QuizHistoryItem(
            settings=entry["settings"],
            results=[LeanQuizResult(is_correct=r["is_correct"]) for r in results],
            date=entry["date"],
            time_taken=entry.get("time_taken"),
        )

    def _write(self, history: list[QuizHistoryItem]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = [item.model_dump(mode="json") for item in history]
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("history_save_failed", path=str(self.path), error=str(e))

    def _remove_file(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("history_clear_failed", path=str(self.path), error=str(e))
