"""LangGraph workflow and session state management."""

# Note: Avoid importing workflow here to prevent circular imports
# Import directly from modules as needed:
# from study_quiz.graph.state import QuizState, create_initial_state
# from study_quiz.graph.workflow import compile_workflow, run_generation

__all__ = [
    "QuizState",
    "GenerationState",
    "create_initial_state",
    "compile_workflow",
    "run_generation",
]
