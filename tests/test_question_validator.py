import pytest

from app.helpers.question_validator import validate_question, to_gradable
from app.schemas.question import (
    SingleSelectQuestion,
    MultipleSelectQuestion,
    FillInBlankQuestion,
    IntegerQuestion,
    UngradableQuestion,
)


def single(correct, options=('a', 'b', 'c'), **extra):
    return {'type': 'SINGLE_SELECT', 'options': list(options), 'correct_answer': correct, **extra}


def test_single_select_index_boundary():
    assert validate_question(single(2)) is True
    assert validate_question(single(3)) is False
    assert validate_question(single(0)) is True
    assert validate_question(single(-1)) is False


@pytest.mark.parametrize('correct', ['1', 1.0, True, None, [1]])
def test_single_select_needs_integer_index(correct):
    assert validate_question(single(correct)) is False


def test_single_select_needs_options():
    assert validate_question(single(0, options=())) is False
    assert validate_question({'type': 'SINGLE_SELECT', 'correct_answer': 0}) is False


def test_multiple_select_rules():
    base = {'type': 'MULTIPLE_SELECT', 'options': ['a', 'b', 'c']}
    assert validate_question({**base, 'correct_answer': [0, 2]}) is True
    assert validate_question({**base, 'correct_answer': []}) is False
    assert validate_question({**base, 'correct_answer': [0, 3]}) is False
    assert validate_question({**base, 'correct_answer': 0}) is False
    assert validate_question({**base, 'options': [], 'correct_answer': [0]}) is False


def test_fill_in_blank_rules():
    base = {'type': 'FILL_IN_BLANK'}
    assert validate_question({**base, 'correct_answer': ['Paris']}) is True
    assert validate_question({**base, 'correct_answer': []}) is False
    assert validate_question({**base, 'correct_answer': ['Paris', '   ']}) is False
    # The old numeric sentinel is no longer accepted.
    assert validate_question({**base, 'correct_answer': 0}) is False
    assert validate_question({**base, 'correct_answer': 'Paris'}) is False


def test_integer_rules():
    assert validate_question({'type': 'INTEGER', 'correct_answer': 42}) is True
    assert validate_question({'type': 'INTEGER', 'correct_answer': -3.5}) is True
    assert validate_question({'type': 'INTEGER', 'correct_answer': '42'}) is False
    assert validate_question({'type': 'INTEGER', 'correct_answer': float('nan')}) is False
    assert validate_question({'type': 'INTEGER', 'correct_answer': False}) is False


def test_unknown_or_missing_type_is_invalid():
    assert validate_question({'type': 'ESSAY', 'correct_answer': 'x'}) is False
    assert validate_question({'correct_answer': 1}) is False
    assert validate_question(None) is False
    assert validate_question(['SINGLE_SELECT']) is False


def test_marks_must_be_positive_integer():
    assert validate_question(single(0, marks=1)) is True
    assert validate_question(single(0, marks=0)) is False
    assert validate_question(single(0, marks=1.5)) is False


def test_to_gradable_builds_typed_variants():
    assert isinstance(to_gradable(single(1, id='q1')), SingleSelectQuestion)

    multi = to_gradable({'id': 'q2', 'type': 'MULTIPLE_SELECT', 'options': ['a', 'b'], 'correct_answer': [1, 0, 1]})
    assert isinstance(multi, MultipleSelectQuestion)
    assert multi.correct_answer == frozenset({0, 1})

    assert isinstance(to_gradable({'type': 'FILL_IN_BLANK', 'correct_answer': ['x']}), FillInBlankQuestion)
    assert isinstance(to_gradable({'type': 'INTEGER', 'correct_answer': 7, 'marks': 4}), IntegerQuestion)


def test_to_gradable_keeps_marks_of_broken_questions():
    broken = to_gradable(single(9, id='q3', marks=5))
    assert isinstance(broken, UngradableQuestion)
    assert broken.marks == 5
    assert broken.type == 'SINGLE_SELECT'


@pytest.mark.parametrize('marks', [None, 0, -2, 1.5, True])
def test_to_gradable_defaults_bad_marks_to_one(marks):
    question = single(1, id='q4')
    if marks is not None:
        question['marks'] = marks
    assert to_gradable(question).marks == 1
    assert to_gradable({**question, 'correct_answer': 9}).marks == 1
