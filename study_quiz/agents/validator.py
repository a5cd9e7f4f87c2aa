"""Answer Contract Validator - Makes untrusted model text safe to consume."""

import json
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from study_quiz.models.errors import MalformedQuestion, MalformedResponse
from study_quiz.models.quiz import Difficulty, GeneratedQuestion, Question

SNIPPET_LENGTH = 200
MAX_OPTIONS = 6
ANSWER_KEY_PATTERN = re.compile(r"[A-F]")
OPTION_PREFIX_PATTERN = re.compile(r"^[A-Z]\)\s*")
FENCE_PATTERN = re.compile(r"```[A-Za-z0-9_-]*")


@dataclass(frozen=True)
class StepResult:
    """Outcome of one extraction step: a value, or the reason it failed."""

    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "StepResult":
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str) -> "StepResult":
        return cls(error=reason)


def strip_fences(text: Any) -> StepResult:
    """Remove code-fence markers wherever they appear."""
    if not isinstance(text, str):
        return StepResult.failure("response is not text")
    stripped = FENCE_PATTERN.sub("", text).strip()
    if not stripped:
        return StepResult.failure("response is empty")
    return StepResult.success(stripped)


def decode_payload(text: str) -> StepResult:
    """
    Decode the outermost brace span, falling back to the whole text.

    The fallback covers payloads that are a JSON string literal or a
    top-level array, where brace slicing would cut through escapes.
    """
    start, end = text.find("{"), text.rfind("}")
    candidates = []
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])
    candidates.append(text)

    last_error = "no JSON object found"
    for candidate in candidates:
        try:
            return StepResult.success(json.loads(candidate))
        except json.JSONDecodeError as e:
            last_error = f"invalid JSON: {e.msg}"
    return StepResult.failure(last_error)


def unwrap_nested(value: Any, depth: int = 2) -> StepResult:
    """Decode again while the payload is itself a JSON-encoded string."""
    for _ in range(depth):
        if not isinstance(value, str):
            break
        fenced = strip_fences(value)
        if not fenced.ok:
            return fenced
        decoded = decode_payload(fenced.value)
        if not decoded.ok:
            return StepResult.failure(f"nested {decoded.error}")
        value = decoded.value
    return StepResult.success(value)


def require_object(value: Any) -> StepResult:
    """Accept an object; wrap a list of objects as a question batch."""
    if isinstance(value, dict):
        return StepResult.success(value)
    if isinstance(value, list):
        if value and all(isinstance(item, dict) for item in value):
            if len(value) == 1:
                return StepResult.success(value[0])
            return StepResult.success({"questions": value})
        return StepResult.failure("array does not contain question objects")
    return StepResult.failure(f"expected a JSON object, got {type(value).__name__}")


EXTRACTION_STEPS: tuple[Callable[[Any], StepResult], ...] = (
    strip_fences,
    decode_payload,
    unwrap_nested,
    require_object,
)


def extract_json(raw_text: str) -> dict[str, Any]:
    """
    Reduce raw model output to a JSON object.

    Tolerates fenced code blocks, prose around the object and double-encoded
    payloads.

    Args:
        raw_text: Text returned by the model

    Returns:
        The decoded object

    Raises:
        MalformedResponse: if no step sequence yields an object
    """
    value: Any = raw_text
    for step in EXTRACTION_STEPS:
        result = step(value)
        if not result.ok:
            snippet = raw_text[:SNIPPET_LENGTH] if isinstance(raw_text, str) else ""
            raise MalformedResponse(result.error, snippet)
        value = result.value
    return value


def candidates_from(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """Split a decoded payload into individual question candidates."""
    questions = payload.get("questions")
    if isinstance(questions, list):
        return questions
    return [payload]


def validate(candidate: Any, min_options: int = 2) -> GeneratedQuestion:
    """
    Enforce the question contract on a decoded candidate.

    Args:
        candidate: Decoded JSON object for one question
        min_options: Minimum number of options required

    Returns:
        The validated candidate

    Raises:
        MalformedQuestion: naming the first violated rule
    """
    if not isinstance(candidate, dict):
        raise MalformedQuestion("candidate is not an object")

    if candidate.get("error"):
        raise MalformedQuestion(f"model declined: {candidate['error']}")

    question = candidate.get("question")
    if not isinstance(question, str) or not question.strip():
        raise MalformedQuestion("question text is missing or empty")

    options = candidate.get("options")
    if not isinstance(options, list):
        raise MalformedQuestion("options must be a list")
    if len(options) < min_options:
        raise MalformedQuestion(
            f"expected at least {min_options} options, got {len(options)}"
        )
    if any(not isinstance(o, str) or not strip_option_prefix(o).strip() for o in options):
        raise MalformedQuestion("every option must be non-empty text")

    answer_keys = candidate.get("answer_keys")
    if not isinstance(answer_keys, list) or not answer_keys:
        raise MalformedQuestion("answer_keys must be a non-empty list")

    valid_range = min(len(options), MAX_OPTIONS)
    for key in answer_keys:
        if not isinstance(key, str) or not ANSWER_KEY_PATTERN.fullmatch(key):
            raise MalformedQuestion(f"answer key {key!r} is not a single letter A-F")
        if ord(key) - ord("A") >= valid_range:
            raise MalformedQuestion(
                f"answer key {key!r} is outside the {len(options)} options"
            )

    flag = candidate.get("isMultipleChoice", candidate.get("is_multiple_choice"))
    if flag is None:
        is_multiple_choice = len(answer_keys) > 1
    elif isinstance(flag, bool):
        is_multiple_choice = flag
    else:
        raise MalformedQuestion("isMultipleChoice must be a boolean")

    if not is_multiple_choice and len(answer_keys) != 1:
        raise MalformedQuestion(
            f"single-answer question has {len(answer_keys)} answer keys"
        )
    if is_multiple_choice and len(answer_keys) < 2:
        raise MalformedQuestion("multiple-choice question needs more than one answer key")

    clean_options = [strip_option_prefix(o) for o in options]
    correct_texts = {clean_options[ord(key) - ord("A")] for key in answer_keys}
    if len(correct_texts) != len(answer_keys):
        raise MalformedQuestion("answer keys do not resolve to distinct options")

    explanation = candidate.get("explanation")
    if explanation is not None and not isinstance(explanation, str):
        raise MalformedQuestion("explanation must be text")

    return GeneratedQuestion(
        question=question.strip(),
        options=options,
        answer_keys=answer_keys,
        is_multiple_choice=is_multiple_choice,
        explanation=explanation,
    )


def strip_option_prefix(option: str) -> str:
    """Drop an "A) " style letter prefix."""
    return OPTION_PREFIX_PATTERN.sub("", option, count=1)


def map_to_question(
    candidate: GeneratedQuestion,
    topic: str,
    id_assigner: Iterator[int],
    difficulty: Difficulty = Difficulty.MEDIUM,
) -> Question:
    """
    Turn a validated candidate into a Question.

    Args:
        candidate: Output of validate()
        topic: Curriculum topic the question was requested for
        id_assigner: Iterator yielding run-unique ids
        difficulty: Difficulty the question was requested at

    Returns:
        Question with cleaned options and resolved answers
    """
    options = [strip_option_prefix(o) for o in candidate.options]
    correct = [options[ord(key) - ord("A")] for key in candidate.answer_keys]

    if len(correct) == 1 and not candidate.is_multiple_choice:
        correct_answer: str | list[str] = correct[0]
    else:
        correct_answer = correct

    return Question(
        id=next(id_assigner),
        question=candidate.question,
        options=options,
        correct_answer=correct_answer,
        is_multiple_choice=candidate.is_multiple_choice,
        difficulty=difficulty,
        explanation=candidate.explanation,
        topic=topic,
    )
