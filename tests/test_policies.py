import pytest

from laticinio.domain.catalog import BATCH_STATUSES, UNITS, label
from laticinio.domain.policies import can_transition, next_statuses, stock_status


@pytest.mark.parametrize(
    "current,lo,hi,expected",
    [
        ("5", "10", "100", "low"),
        ("10", "10", "100", "low"),
        ("50", "10", "100", "normal"),
        ("100", "10", "100", "high"),
        ("150", "10", "100", "high"),
        ("50", None, None, "normal"),
        ("0", None, "100", "normal"),
        ("", "0", None, "low"),
        ("abc", "1", None, "low"),
        ("2,5", "2", None, "normal"),
    ],
)
def test_stock_status(current, lo, hi, expected):
    assert stock_status(current, lo, hi) == expected


def test_terminal_statuses_have_no_next():
    assert next_statuses("completed") == ()
    assert next_statuses("cancelled") == ()
    assert can_transition("planned", "in_progress")
    assert not can_transition("completed", "in_progress")


def test_next_statuses_unknown():
    with pytest.raises(ValueError):
        next_statuses("archived")


def test_catalog():
    assert UNITS == ("kg", "g", "L", "ml", "piece")
    assert set(BATCH_STATUSES) == {"planned", "in_progress", "completed", "cancelled"}
    assert label("raw_milk") == "Raw milk"
    assert label("in_progress") == "In progress"
