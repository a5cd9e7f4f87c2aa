"""Local persistence."""

from .history import MAX_HISTORY_ITEMS, HistoryStore

__all__ = ["HistoryStore", "MAX_HISTORY_ITEMS"]
