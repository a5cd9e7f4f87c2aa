"""Question-bank file loading."""

import json
from collections.abc import Iterable
from pathlib import Path

import structlog
from pydantic import ValidationError

from study_quiz.models.errors import InsufficientPoolError, MalformedBankFile
from study_quiz.models.quiz import Difficulty, LoadedQuiz, Question, QuizMode, QuizSettings

logger = structlog.get_logger(__name__)

DEFAULT_TOPIC = "Uncategorized"


def parse_question_bank(text: str, start_id: int = 0) -> list[Question]:
    """
    Parse one question-bank document.

    Items are matched to the answer key by id. Items without an answer or
    with an out-of-range option index are dropped with a warning.

    Args:
        text: JSON document, possibly double-stringified
        start_id: First id to assign

    Returns:
        Questions with ids start_id, start_id + 1, ...

    Raises:
        MalformedBankFile: if the document is not JSON or lacks items/answerKey
    """
    try:
        data = json.loads(text)
        # Handle double-stringified JSON
        if isinstance(data, str):
            data = json.loads(data)
    except json.JSONDecodeError as e:
        raise MalformedBankFile(f"Invalid JSON: {e.msg}") from e

    if not isinstance(data, dict) or "items" not in data or "answerKey" not in data:
        raise MalformedBankFile(
            "Invalid JSON format: 'items' and 'answerKey' properties are required."
        )

    try:
        bank = LoadedQuiz.model_validate(data)
    except ValidationError as e:
        raise MalformedBankFile(f"Invalid question bank: {e.error_count()} error(s)") from e

    answers = {answer.id: answer for answer in bank.answer_key}
    questions: list[Question] = []

    for item in bank.items:
        answer = answers.get(item.id)
        if answer is None:
            logger.warning("question_bank_item_skipped", item_id=item.id, reason="no answer")
            continue

        indices = answer.correct_option_indices
        if not indices or any(i < 0 or i >= len(item.options) for i in indices):
            logger.warning(
                "question_bank_item_skipped",
                item_id=item.id,
                reason="answer index out of range",
                indices=indices,
            )
            continue

        correct = [item.options[i] for i in indices]
        is_multiple_choice = item.type == "multi" or len(correct) > 1

        try:
            question = Question(
                id=start_id + len(questions),
                question=item.stem,
                options=item.options,
                correct_answer=correct if is_multiple_choice else correct[0],
                is_multiple_choice=is_multiple_choice,
                difficulty=Difficulty.MEDIUM,
                explanation=answer.explanation,
                topic=item.topics[0] if item.topics else DEFAULT_TOPIC,
            )
        except ValidationError as e:
            logger.warning(
                "question_bank_item_skipped",
                item_id=item.id,
                reason="invalid question",
                errors=e.error_count(),
            )
            continue
        questions.append(question)

    return questions


def load_question_banks(paths: Iterable[str | Path]) -> list[Question]:
    """
    Load and merge several question-bank files.

    Args:
        paths: Files to read, in order

    Returns:
        All questions with ids unique across files

    Raises:
        MalformedBankFile: naming the file that could not be processed
        InsufficientPoolError: if no file yields a question
    """
    questions: list[Question] = []
    for number, path in enumerate(paths, 1):
        try:
            text = Path(path).read_text(encoding="utf-8")
            questions.extend(parse_question_bank(text, start_id=len(questions)))
        except (OSError, UnicodeDecodeError, MalformedBankFile) as e:
            raise MalformedBankFile(f"Error processing file #{number} ({path}): {e}") from e
        logger.info("question_bank_loaded", path=str(path), total=len(questions))

    if not questions:
        raise InsufficientPoolError(have=0, need=1)
    return questions


def practice_settings_for(questions: list[Question]) -> QuizSettings:
    """Practice settings covering every loaded question."""
    topics = list(dict.fromkeys(q.topic for q in questions))
    return QuizSettings(
        topics=topics,
        difficulty=[Difficulty.MEDIUM],
        number_of_questions=len(questions),
        mode=QuizMode.PRACTICE,
    )
