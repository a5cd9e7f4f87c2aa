"""Question banks: file loading and assessment selection."""

from .loader import load_question_banks, parse_question_bank, practice_settings_for
from .selector import build_assessment, select_assessment

__all__ = [
    "load_question_banks",
    "parse_question_bank",
    "practice_settings_for",
    "build_assessment",
    "select_assessment",
]
