import pytest

from app.helpers.question_validator import to_gradable
from app.helpers.quiz_answer_evaluator import (
    grade_question,
    score_submission,
    explain_submission,
    compute_total_marks,
    percentage,
)


SINGLE = to_gradable({'id': 's', 'type': 'SINGLE_SELECT', 'options': ['a', 'b', 'c'], 'correct_answer': 1, 'marks': 2})
MULTI = to_gradable({'id': 'm', 'type': 'MULTIPLE_SELECT', 'options': ['a', 'b', 'c', 'd'], 'correct_answer': [0, 2], 'marks': 2})
BLANK = to_gradable({'id': 'f', 'type': 'FILL_IN_BLANK', 'correct_answer': ['Paris', 'paris city'], 'marks': 1})
INTEGER = to_gradable({'id': 'i', 'type': 'INTEGER', 'correct_answer': 42, 'marks': 3})


def answers(**by_id):
    return [{'question_id': key, 'answer': value} for key, value in by_id.items()]


def test_single_select_exact_match_only():
    assert grade_question(SINGLE, 1) == (True, 2)
    assert grade_question(SINGLE, 0) == (False, 0)
    assert grade_question(SINGLE, '1') == (False, 0)
    assert grade_question(SINGLE, True) == (False, 0)


@pytest.mark.parametrize('selected, expected', [
    ([0, 2], 2),
    ([0], 1),
    ([0, 1, 2], 2),
    ([1], 0),
    ([], 0),
    ([0, 0], 1),
])
def test_multiple_select_partial_credit(selected, expected):
    assert grade_question(MULTI, selected).obtained_marks == expected


def test_multiple_select_correctness_flag():
    assert grade_question(MULTI, [0, 2]).is_correct is True
    assert grade_question(MULTI, [0, 1, 2]).is_correct is True
    assert grade_question(MULTI, [2]).is_correct is False
    assert grade_question(MULTI, 0) == (False, 0)


def test_fill_in_blank_trims_and_ignores_case():
    assert grade_question(BLANK, ' PARIS ') == (True, 1)
    assert grade_question(BLANK, 'Paris City') == (True, 1)
    assert grade_question(BLANK, 'London') == (False, 0)
    assert grade_question(BLANK, 42) == (False, 0)


def test_integer_coerces_numeric_strings():
    assert grade_question(INTEGER, '42') == (True, 3)
    assert grade_question(INTEGER, 42.0) == (True, 3)
    assert grade_question(INTEGER, 42.5) == (False, 0)
    assert grade_question(INTEGER, '') == (False, 0)
    assert grade_question(INTEGER, 'forty-two') == (False, 0)
    assert grade_question(INTEGER, [42]) == (False, 0)


def test_missing_and_null_answers_score_zero():
    assert grade_question(SINGLE, None) == (False, 0)
    score, total = score_submission([SINGLE, MULTI], [])
    assert score == 0
    assert total == 4


def test_total_marks_counts_unanswered_questions():
    q1 = to_gradable({'id': 'a', 'type': 'INTEGER', 'correct_answer': 1, 'marks': 1})
    q2 = to_gradable({'id': 'b', 'type': 'INTEGER', 'correct_answer': 2, 'marks': 2})
    q3 = to_gradable({'id': 'c', 'type': 'INTEGER', 'correct_answer': 3, 'marks': 3})

    score, total = score_submission([q1, q2, q3], answers(b=2))
    assert (score, total) == (2, 6)
    assert compute_total_marks([q1, q2, q3]) == 6


def test_ungradable_question_counts_toward_total_but_scores_zero():
    broken = to_gradable({'id': 'x', 'type': 'SINGLE_SELECT', 'options': ['a'], 'correct_answer': 5, 'marks': 4})
    score, total = score_submission([broken, SINGLE], answers(x=5, s=1))
    assert (score, total) == (2, 6)


def test_first_answer_for_a_question_wins():
    submitted = [
        {'question_id': 's', 'answer': 1},
        {'question_id': 's', 'answer': 0},
    ]
    assert score_submission([SINGLE], submitted) == (2, 2)


def test_answers_for_unknown_questions_are_ignored():
    assert score_submission([SINGLE], answers(nope=1, s=0)) == (0, 2)


def test_fractional_score_is_preserved():
    three_way = to_gradable({'id': 't', 'type': 'MULTIPLE_SELECT', 'options': ['a', 'b', 'c'], 'correct_answer': [0, 1, 2], 'marks': 1})
    score, _ = score_submission([three_way], answers(t=[0]))
    assert score == pytest.approx(1 / 3)


@pytest.mark.parametrize('submitted', [
    answers(s=1, m=[0, 2], f='paris', i='42'),
    answers(s=0, m=[0, 3], f='Lyon', i=41),
    answers(m=[2], i=42),
    answers(s=None, m='0', f=' Paris City ', i=' 42 '),
    [],
])
def test_detail_breakdown_reconciles_with_score(submitted):
    questions = [SINGLE, MULTI, BLANK, INTEGER]
    score, _ = score_submission(questions, submitted)
    outcomes = explain_submission(questions, submitted)

    assert [o.question.id for o in outcomes] == ['s', 'm', 'f', 'i']
    assert sum(o.grade.obtained_marks for o in outcomes) == pytest.approx(score)


def test_explain_marks_answered_questions():
    outcomes = explain_submission([SINGLE, BLANK], answers(s=None, f='Paris'))
    assert [o.answered for o in outcomes] == [False, True]
    assert outcomes[1].answer == 'Paris'


@pytest.mark.parametrize('score, total, expected', [
    (5, 10, 50),
    (1, 8, 13),
    (1, 3, 33),
    (2, 3, 67),
    (0, 0, 0),
    (7, 7, 100),
])
def test_percentage_rounds_half_up(score, total, expected):
    assert percentage(score, total) == expected
