import math
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from app.helpers.question_validator import is_number
from app.schemas.question import (
    GradableQuestion,
    SingleSelectQuestion,
    MultipleSelectQuestion,
    FillInBlankQuestion,
    IntegerQuestion,
)


class QuestionGrade(NamedTuple):
    is_correct: bool
    obtained_marks: float


class QuestionOutcome(NamedTuple):
    question: GradableQuestion
    answered: bool
    answer: Any
    grade: QuestionGrade


NO_CREDIT = QuestionGrade(False, 0)


def _normalize_text(value: str) -> str:
    return value.strip().lower()


def _to_number(value: Any) -> Optional[float]:
    """Numeric coercion for submitted answers; None when not a number."""
    if is_number(value):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def grade_question(question: GradableQuestion, answer: Any) -> QuestionGrade:
    """
    Grade one submitted answer against one question.

    This is the only place comparison rules live: the aggregate score and
    the per-question breakdown both go through it. Never raises; answers of
    the wrong shape earn no credit.
    """
    if answer is None:
        return NO_CREDIT

    if isinstance(question, SingleSelectQuestion):
        if is_number(answer) and answer == question.correct_answer:
            return QuestionGrade(True, question.marks)
        return NO_CREDIT

    if isinstance(question, MultipleSelectQuestion):
        if not isinstance(answer, (list, tuple, set, frozenset)):
            return NO_CREDIT
        selected = {choice for choice in answer if is_number(choice)}
        # Wrong selections are neither counted nor penalised.
        hits = len(selected & question.correct_answer)
        expected = len(question.correct_answer)
        return QuestionGrade(hits == expected, question.marks * hits / expected)

    if isinstance(question, FillInBlankQuestion):
        if not isinstance(answer, str):
            return NO_CREDIT
        accepted = {_normalize_text(text) for text in question.correct_answer}
        if _normalize_text(answer) in accepted:
            return QuestionGrade(True, question.marks)
        return NO_CREDIT

    if isinstance(question, IntegerQuestion):
        number = _to_number(answer)
        if number is not None and number == question.correct_answer:
            return QuestionGrade(True, question.marks)
        return NO_CREDIT

    return NO_CREDIT


def compute_total_marks(questions: Iterable[GradableQuestion]) -> int:
    return sum(q.marks or 1 for q in questions)


def answers_by_question(answers: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Map question id -> submitted answer; the first entry for an id wins."""
    answer_map: Dict[str, Any] = {}
    for entry in answers:
        key = str(entry.get("question_id"))
        if key not in answer_map:
            answer_map[key] = entry.get("answer")
    return answer_map


def explain_submission(
    questions: Sequence[GradableQuestion],
    answers: Iterable[Mapping[str, Any]],
) -> List[QuestionOutcome]:
    """Per-question correctness and obtained marks, in question order."""
    answer_map = answers_by_question(answers)
    outcomes: List[QuestionOutcome] = []

    for question in questions:
        key = str(question.id)
        answered = key in answer_map and answer_map[key] is not None
        answer = answer_map.get(key)
        outcomes.append(
            QuestionOutcome(
                question=question,
                answered=answered,
                answer=answer,
                grade=grade_question(question, answer),
            )
        )

    return outcomes


def score_submission(
    questions: Sequence[GradableQuestion],
    answers: Iterable[Mapping[str, Any]],
) -> Tuple[float, int]:
    """
    Score a submission.

    Returns (score, total_marks). Unanswered questions still count toward
    total_marks; score keeps the fractional part from multi-select credit.
    """
    outcomes = explain_submission(questions, answers)
    score = sum(outcome.grade.obtained_marks for outcome in outcomes)
    return score, compute_total_marks(questions)


def percentage(score: float, total_marks: float) -> int:
    """Whole-number percentage, rounding halves up; 0 when there is nothing to score."""
    if not total_marks:
        return 0
    return math.floor(score / total_marks * 100 + 0.5)
