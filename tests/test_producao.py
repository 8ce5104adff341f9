import random
import re
from datetime import date
from decimal import Decimal

import pytest

from laticinio.domain.errors import ErrorKind
from laticinio.domain.models import BatchDraft
from laticinio.usecases.producao import (
    check_batch_transition,
    generate_batch_number,
    new_batch_draft,
    validate_batch_completion,
    validate_batch_draft,
)


def test_generate_batch_number_format():
    number = generate_batch_number(date(2024, 3, 9), rng=random.Random(1))
    assert re.fullmatch(r"B-20240309-\d{4}", number)
    assert number == generate_batch_number(date(2024, 3, 9), rng=random.Random(1))


def test_new_batch_draft_prefills_number_and_date():
    draft = new_batch_draft(recipe_id=12, today=date(2024, 3, 9))
    assert draft.recipe_id == "12"
    assert draft.start_date == "2024-03-09"
    assert draft.batch_number.startswith("B-20240309-")
    assert draft.planned_quantity == ""


def test_validate_batch_ok():
    draft = new_batch_draft(recipe_id="4", today=date(2024, 3, 9))
    draft.planned_quantity = "250"
    res = validate_batch_draft(draft)
    assert res.ok
    payload = res.value.to_payload()
    assert payload["recipe_id"] == 4
    assert payload["planned_quantity"] == Decimal("250")
    assert payload["start_date"] == date(2024, 3, 9)
    assert "supervisor_id" not in payload


def test_validate_batch_errors():
    res = validate_batch_draft(BatchDraft(planned_quantity="0", start_date="09/13/2024"))
    assert res.kinds() == {
        "recipe_id": ErrorKind.MISSING_FIELD,
        "batch_number": ErrorKind.MISSING_FIELD,
        "planned_quantity": ErrorKind.INVALID_QUANTITY,
        "start_date": ErrorKind.INVALID_DATE,
    }
    assert res.messages()["recipe_id"] == "Recipe is required"


@pytest.mark.parametrize("qty,ok", [("10", True), ("0.5", True), ("0", False), ("", False), ("x", False)])
def test_batch_completion(qty, ok):
    res = validate_batch_completion(qty)
    assert res.ok is ok
    if ok:
        assert res.value == {"actual_quantity": Decimal(qty)}
    else:
        assert res.kinds() == {"actual_quantity": ErrorKind.INVALID_QUANTITY}


@pytest.mark.parametrize(
    "current,target",
    [
        ("planned", "in_progress"),
        ("planned", "cancelled"),
        ("in_progress", "completed"),
        ("in_progress", "cancelled"),
    ],
)
def test_allowed_transitions(current, target):
    res = check_batch_transition(current, target)
    assert res.ok
    assert res.value == target


@pytest.mark.parametrize(
    "current,target",
    [
        ("planned", "completed"),
        ("completed", "cancelled"),
        ("cancelled", "planned"),
        ("in_progress", "planned"),
        ("planned", "planned"),
    ],
)
def test_rejected_transitions(current, target):
    res = check_batch_transition(current, target)
    assert res.kinds() == {"status": ErrorKind.INVALID_TRANSITION}


def test_unknown_status_is_invalid_choice():
    assert check_batch_transition("paused", "completed").kinds() == {"status": ErrorKind.INVALID_CHOICE}
    assert check_batch_transition("planned", "done").kinds() == {"target": ErrorKind.INVALID_CHOICE}
