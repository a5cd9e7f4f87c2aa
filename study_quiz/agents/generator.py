"""Question Generator Agent - Generates curriculum questions using AI."""

from collections.abc import Iterator

import structlog
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from study_quiz.agents.validator import (
    candidates_from,
    extract_json,
    map_to_question,
    validate,
)
from study_quiz.config.settings import get_settings
from study_quiz.models.errors import MalformedQuestion
from study_quiz.models.quiz import Difficulty, GenerationRequest, Question

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT = """You are an exam question generator for the IFRS FSA Level 1 (Sustainability Accounting) exam.
You write multiple-choice questions in English.

Rules:
- Test understanding and application of sustainability disclosure concepts, not generic finance
- Prefix every option with its letter, e.g. "A) ..."
- answer_keys lists the letters of the correct options
- Set isMultipleChoice to true only when more than one option is correct
- Keep the explanation short and tie it to the curriculum topic
- If you cannot write a sound question for the topic, return {"error": "<reason>"}

Difficulty levels:
- easy: recall of definitions and facts
- medium: applying a concept to a short situation
- hard: distinguishing between closely related concepts or standards

Respond with JSON only."""

EXAM_STYLE_RULES = """
Align with the official exam style:
- Exactly 4 options (A-D)
- Scenario-based stems where possible
- Distractors must be plausible statements drawn from the same topic area
- Avoid "all of the above" and "none of the above"
"""

SINGLE_FORMAT = """{
  "question": "Question text",
  "options": ["A) ...", "B) ...", "C) ...", "D) ..."],
  "answer_keys": ["B"],
  "isMultipleChoice": false,
  "explanation": "Why B is correct"
}"""


def build_messages(request: GenerationRequest) -> list[BaseMessage]:
    """
    Build the chat messages for one generation request.

    Args:
        request: Topic, difficulty, count and style options

    Returns:
        System and human messages
    """
    if request.count == 1:
        output_format = f"Return one JSON object:\n{SINGLE_FORMAT}"
    else:
        output_format = (
            f'Return a JSON object {{"questions": [...]}} holding exactly '
            f"{request.count} objects shaped like:\n{SINGLE_FORMAT}"
        )

    style = EXAM_STYLE_RULES if request.align_with_exam else ""
    examples = format_examples(request.examples) if request.examples else ""

    user_prompt = f"""Generate {request.count} question(s) on the curriculum topic: {request.topic}

Difficulty level: {request.difficulty.value}
{style}
{examples}
{output_format}"""

    return [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(content=user_prompt),
    ]


def format_examples(examples: list[Question]) -> str:
    """
    Render example questions for style grounding.

    Args:
        examples: Questions whose style should be imitated

    Returns:
        Prompt section listing the examples
    """
    lines = ["Match the style of these example questions (do not copy them):"]
    for i, q in enumerate(examples, 1):
        lines.append(f"Example {i}: {q.question}")
        for letter, option in zip("ABCDEF", q.options):
            lines.append(f"  {letter}) {option}")
        lines.append(f"  Correct: {', '.join(q.correct_answers)}")
    return "\n".join(lines)


def request_completion(request: GenerationRequest, llm: BaseChatModel) -> str:
    """
    Send one request to the chat model and return its text.

    Args:
        request: Generation request
        llm: Chat model to call

    Returns:
        Raw response text
    """
    response = llm.invoke(build_messages(request))
    content = response.content
    if isinstance(content, list):
        # Some providers return content blocks
        content = "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return content


def questions_from_response(
    raw_text: str,
    topic: str,
    difficulty: Difficulty,
    id_assigner: Iterator[int],
    min_options: int = 2,
) -> list[Question]:
    """
    Extract, validate and map every question candidate in a response.

    Invalid candidates in a multi-question reply are skipped. If none
    survive, the first contract violation is raised.

    Raises:
        MalformedResponse: if the text holds no JSON object
        MalformedQuestion: if no candidate satisfies the contract
    """
    payload = extract_json(raw_text)
    questions: list[Question] = []
    first_error: MalformedQuestion | None = None

    for index, candidate in enumerate(candidates_from(payload)):
        try:
            validated = validate(candidate, min_options=min_options)
        except MalformedQuestion as e:
            logger.warning(
                "generated_question_rejected",
                topic=topic,
                candidate_index=index,
                reason=e.reason,
            )
            first_error = first_error or e
            continue
        questions.append(map_to_question(validated, topic, id_assigner, difficulty))

    if not questions:
        raise first_error or MalformedQuestion("response contained no questions")
    return questions


def generate_questions(
    request: GenerationRequest,
    llm: BaseChatModel,
    id_assigner: Iterator[int],
) -> list[Question]:
    """
    Question Generator Agent: produce validated questions for one topic.

    Args:
        request: Generation request
        llm: Chat model to call
        id_assigner: Iterator yielding run-unique ids

    Returns:
        At most request.count questions
    """
    min_options = get_settings().strict_min_options if request.align_with_exam else 2
    raw_text = request_completion(request, llm)
    logger.debug("generation_response_received", topic=request.topic, size=len(raw_text))
    questions = questions_from_response(
        raw_text,
        request.topic,
        request.difficulty,
        id_assigner,
        min_options=min_options,
    )
    return questions[: request.count]
