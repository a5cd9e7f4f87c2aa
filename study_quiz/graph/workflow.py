"""LangGraph workflow definition for question generation."""

import itertools
import random
from typing import Any, Literal

import structlog
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph

from study_quiz.agents.generator import generate_questions
from study_quiz.agents.llm import get_chat_model
from study_quiz.agents.planner import plan_generation
from study_quiz.curriculum.topic_tree import TopicTree, get_curriculum_tree
from study_quiz.graph.state import GenerationState, create_generation_state
from study_quiz.models.errors import (
    GenerationError,
    MalformedQuestion,
    MalformedResponse,
    QuizError,
)
from study_quiz.models.quiz import GenerationRequest, Question, QuizSettings

logger = structlog.get_logger(__name__)

PROVIDER_FAILURE_MESSAGE = (
    "Failed to generate questions. The AI service may be overloaded or the "
    "request was invalid. Please try again."
)
NOTHING_GENERATED_MESSAGE = (
    "The AI failed to generate any questions for the selected topics. "
    "Please try again with different topics."
)


def _configurable(config: RunnableConfig | None, key: str) -> Any:
    return ((config or {}).get("configurable") or {}).get(key)


def plan_slots(state: GenerationState, config: RunnableConfig) -> dict[str, Any]:
    """Planner node: split the run into sequential generation slots."""
    tree = _configurable(config, "tree") or get_curriculum_tree()
    slots = plan_generation(state["settings"], tree=tree, rng=_configurable(config, "rng"))
    logger.info("generation_planned", slots=len(slots))
    return {"slots": slots, "next_slot": 0}


def generate_slot(state: GenerationState, config: RunnableConfig) -> dict[str, Any]:
    """
    Generator node: run the next slot's request.

    A malformed reply skips the slot; any other failure aborts the batch.
    """
    llm: BaseChatModel | None = _configurable(config, "llm")
    if llm is None:
        llm = get_chat_model()
    slot = state["slots"][state["next_slot"]]
    questions = list(state["questions"])
    errors = list(state["errors"])
    remaining = state["settings"].number_of_questions - len(questions)

    next_id = max((q.id for q in questions), default=-1) + 1
    request = GenerationRequest(
        topic=slot.topic,
        difficulty=slot.difficulty,
        count=min(slot.count, remaining),
        align_with_exam=state["align_with_exam"],
        examples=state["examples"],
    )

    try:
        generated = generate_questions(request, llm, itertools.count(next_id))
    except (MalformedResponse, MalformedQuestion) as e:
        logger.warning(
            "generation_slot_failed",
            slot=slot.slot_number,
            topic=slot.topic,
            error=str(e),
        )
        errors.append(f"{slot.topic}: {e}")
        generated = []
    except QuizError:
        raise
    except Exception as e:
        logger.error("generation_request_failed", slot=slot.slot_number, exc_info=e)
        raise GenerationError(PROVIDER_FAILURE_MESSAGE) from e

    questions.extend(generated[:remaining])
    return {
        "questions": questions,
        "errors": errors,
        "next_slot": state["next_slot"] + 1,
    }


def finalize_questions(state: GenerationState) -> dict[str, Any]:
    """Finalizer node: cap the batch to the requested size."""
    questions = state["questions"][: state["settings"].number_of_questions]
    if not questions:
        raise GenerationError(NOTHING_GENERATED_MESSAGE)
    if len(questions) < state["settings"].number_of_questions:
        logger.warning(
            "generation_short",
            produced=len(questions),
            requested=state["settings"].number_of_questions,
        )
    return {"questions": questions}


def should_continue_generating(state: GenerationState) -> Literal["generate", "finalize"]:
    """
    Determine whether another slot should run.

    Args:
        state: Current generation state

    Returns:
        "generate" while slots remain and the quota is unmet, "finalize" otherwise
    """
    quota_met = len(state["questions"]) >= state["settings"].number_of_questions
    if state["next_slot"] < len(state["slots"]) and not quota_met:
        return "generate"
    return "finalize"


def create_generation_workflow() -> StateGraph:
    """
    Create the LangGraph workflow for question generation.

    The workflow follows this structure:
    1. Planner - Splits the run into slots over the selected leaf topics
    2. Generator - Runs one slot per step, sequentially
    3. [Conditional] Loop back while slots remain and the quota is unmet
    4. Finalizer - Caps the batch and rejects an empty one

    Returns:
        StateGraph ready to compile
    """
    workflow = StateGraph(GenerationState)

    workflow.add_node("planner", plan_slots)
    workflow.add_node("generator", generate_slot)
    workflow.add_node("finalizer", finalize_questions)

    workflow.set_entry_point("planner")
    workflow.add_edge("planner", "generator")
    workflow.add_conditional_edges(
        "generator",
        should_continue_generating,
        {
            "generate": "generator",
            "finalize": "finalizer",
        },
    )
    workflow.add_edge("finalizer", END)

    return workflow


def compile_workflow():
    """
    Compile the workflow and return it ready for execution.

    Returns:
        Compiled workflow
    """
    return create_generation_workflow().compile()


def run_generation(
    settings: QuizSettings,
    llm: BaseChatModel | None = None,
    rng: random.Random | None = None,
    align_with_exam: bool = True,
    examples: list[Question] | None = None,
    tree: TopicTree | None = None,
) -> tuple[list[Question], list[str]]:
    """
    Generate the questions for a run.

    Args:
        settings: Effective run settings
        llm: Chat model (defaults to the configured provider, built on first request)
        rng: Random source for planning
        align_with_exam: Ask for official exam style
        examples: Questions to ground the style on
        tree: Curriculum tree (defaults to the built-in curriculum)

    Returns:
        Tuple of (questions, per-slot error messages)

    Raises:
        QuizValidationError: if no leaf topic is selected
        GenerationError: if the provider fails or nothing is produced
    """
    workflow = compile_workflow()
    state = create_generation_state(settings, align_with_exam, examples)
    config: RunnableConfig = {
        "configurable": {
            "llm": llm,
            "rng": rng,
            "tree": tree,
        },
        # Planner and finalizer plus at most one step per question
        "recursion_limit": settings.number_of_questions + 10,
    }
    final_state = workflow.invoke(state, config=config)
    return final_state["questions"], final_state["errors"]
