import math
from typing import Any, Mapping

from app.models import QuestionType
from app.schemas.question import (
    GradableQuestion,
    SingleSelectQuestion,
    MultipleSelectQuestion,
    FillInBlankQuestion,
    IntegerQuestion,
    UngradableQuestion,
)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    """True for finite ints and floats; booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _has_options(options: Any) -> bool:
    return (
        isinstance(options, (list, tuple))
        and len(options) > 0
        and all(isinstance(opt, str) for opt in options)
    )


def _is_index(value: Any, options) -> bool:
    return _is_int(value) and 0 <= value < len(options)


def _question_type(question: Mapping[str, Any]):
    try:
        return QuestionType(question.get("type"))
    except (TypeError, ValueError):
        return None


def validate_question(question: Mapping[str, Any]) -> bool:
    """
    Check that a question's options and correct answer agree with its type.

    Pure: never raises for bad input, it just answers False.
    """
    if not isinstance(question, Mapping):
        return False

    marks = question.get("marks")
    if marks is not None and not (_is_int(marks) and marks >= 1):
        return False

    question_type = _question_type(question)
    options = question.get("options")
    correct = question.get("correct_answer")

    if question_type == QuestionType.SINGLE_SELECT:
        return _has_options(options) and _is_index(correct, options)

    if question_type == QuestionType.MULTIPLE_SELECT:
        return (
            _has_options(options)
            and isinstance(correct, (list, tuple, set, frozenset))
            and len(correct) > 0
            and all(_is_index(c, options) for c in correct)
        )

    if question_type == QuestionType.FILL_IN_BLANK:
        return (
            isinstance(correct, (list, tuple))
            and len(correct) > 0
            and all(isinstance(c, str) and c.strip() for c in correct)
        )

    if question_type == QuestionType.INTEGER:
        return is_number(correct)

    return False


def _marks_or_default(marks: Any) -> int:
    """Marks default to 1 when missing or not a positive integer."""
    return marks if _is_int(marks) and marks >= 1 else 1


def question_fields(question) -> dict:
    """Validator input for an ORM `Question` row."""
    return {
        "id": question.id,
        "type": question.type,
        "options": question.options,
        "correct_answer": question.correct_answer,
        "marks": question.marks,
    }


def question_snapshot(question) -> dict:
    """
    JSON-safe copy of an ORM `Question` as it was graded.

    Stored with each response so later edits to the quiz do not change
    how that response is explained.
    """
    return {
        "id": str(question.id),
        "text": question.text,
        "type": getattr(question.type, "value", question.type),
        "options": list(question.options or []),
        "correct_answer": question.correct_answer,
        "marks": question.marks,
        "explanation": question.explanation,
    }


def to_gradable(question: Mapping[str, Any]) -> GradableQuestion:
    """Build the typed variant the scoring engine works on."""
    question_id = question.get("id")
    marks = _marks_or_default(question.get("marks"))

    if not validate_question(question):
        question_type = question.get("type")
        return UngradableQuestion(
            id=question_id,
            marks=marks,
            type=str(getattr(question_type, "value", question_type)),
        )

    question_type = _question_type(question)
    correct = question["correct_answer"]

    if question_type == QuestionType.SINGLE_SELECT:
        return SingleSelectQuestion(
            id=question_id, marks=marks,
            options=list(question["options"]), correct_answer=correct,
        )
    if question_type == QuestionType.MULTIPLE_SELECT:
        return MultipleSelectQuestion(
            id=question_id, marks=marks,
            options=list(question["options"]), correct_answer=frozenset(correct),
        )
    if question_type == QuestionType.FILL_IN_BLANK:
        return FillInBlankQuestion(id=question_id, marks=marks, correct_answer=list(correct))
    return IntegerQuestion(id=question_id, marks=marks, correct_answer=correct)
