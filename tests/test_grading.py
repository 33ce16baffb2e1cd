from decimal import Decimal
from types import SimpleNamespace

import pytest

from assessments.services.grading import compute_score, is_choice_correct, max_score, percentage


@pytest.mark.parametrize(
    "selected, correct, expected",
    [
        (["b"], ["b"], True),
        (["a"], ["b"], False),
        (["a"], ["a", "d"], False),
        (["a", "d"], ["a", "d"], True),
        (["d", "a"], ["a", "d"], True),
        (["a", "d", "e"], ["a", "d"], False),
        ([], ["a"], False),
        (None, ["a"], False),
        ([], [], False),
    ],
)
def test_choice_answer_must_match_key_exactly(selected, correct, expected):
    assert is_choice_correct(selected, correct) is expected


def _answer(points, graded=True):
    return SimpleNamespace(points_awarded=None if points is None else Decimal(points), is_graded=graded)


def test_compute_score_only_counts_graded_answers():
    answers = [_answer("2"), _answer("3"), _answer("4", graded=False), _answer(None, graded=False)]
    assert compute_score(answers) == Decimal("5")


def test_compute_score_of_nothing_is_zero():
    assert compute_score([]) == Decimal("0")


def test_max_score_sums_every_question():
    questions = [SimpleNamespace(points=Decimal("2")), SimpleNamespace(points=Decimal("3")), SimpleNamespace(points=Decimal("5"))]
    assert max_score(questions) == Decimal("10")


@pytest.mark.parametrize(
    "score, maximum, expected",
    [
        (Decimal("5"), Decimal("10"), 50),
        (Decimal("9"), Decimal("10"), 90),
        (Decimal("1"), Decimal("3"), 33),
        (Decimal("2"), Decimal("3"), 67),
        (Decimal("1"), Decimal("8"), 13),
        (None, Decimal("10"), 0),
        (Decimal("0"), Decimal("0"), 0),
        (Decimal("3"), Decimal("0"), 0),
    ],
)
def test_percentage(score, maximum, expected):
    assert percentage(score, maximum) == expected
