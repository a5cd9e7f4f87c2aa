"""AI agents for question generation and results analysis."""

from .coordinator import analyze_results
from .generator import generate_questions
from .planner import effective_settings, plan_generation, review_settings
from .validator import extract_json, map_to_question, validate

__all__ = [
    "plan_generation",
    "effective_settings",
    "review_settings",
    "generate_questions",
    "extract_json",
    "validate",
    "map_to_question",
    "analyze_results",
]
