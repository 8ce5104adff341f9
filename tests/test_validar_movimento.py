from datetime import date
from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from laticinio.domain.errors import ErrorKind
from laticinio.domain.models import InboundMovement, OutboundMovement, StockMovementDraft
from laticinio.usecases.validar_movimento import validate_movement_draft, validate_movement_sheet


def test_zero_quantity_is_invalid():
    res = validate_movement_draft({"quantity": "0"}, "in")
    assert res.kinds()["quantity"] == ErrorKind.INVALID_QUANTITY
    assert res.messages()["quantity"] == "Quantity must be greater than zero"


@pytest.mark.parametrize("qty", ["", "-3", "dez"])
def test_quantity_must_be_positive_number(qty):
    res = validate_movement_draft({"quantity": qty, "movement_date": "2024-01-01"}, "out")
    assert res.kinds() == {"quantity": ErrorKind.INVALID_QUANTITY}


def test_minimal_inbound_movement():
    res = validate_movement_draft({"quantity": "5", "movement_date": "2024-01-01"}, "in")
    assert res.ok
    assert isinstance(res.value, InboundMovement)
    assert res.value.to_payload() == {
        "movement_type": "in",
        "quantity": Decimal("5"),
        "movement_date": date(2024, 1, 1),
    }


def test_inbound_keeps_price_and_expiration():
    res = validate_movement_draft(StockMovementDraft(
        quantity="12,5",
        movement_date="01/03/2024",
        unit_price="2.40",
        expiration_date="2024-03-15",
        batch_number="L-77",
        supplier_id="4",
    ), "in")
    assert res.ok
    payload = res.value.to_payload()
    assert payload["quantity"] == Decimal("12.5")
    assert payload["unit_price"] == Decimal("2.40")
    assert payload["expiration_date"] == date(2024, 3, 15)
    assert payload["supplier_id"] == 4
    assert payload["batch_number"] == "L-77"


def test_outbound_strips_inbound_only_fields():
    res = validate_movement_draft({
        "quantity": "3",
        "movement_date": "2024-01-01",
        "unit_price": "not a number",
        "expiration_date": "never",
        "client_id": "C-9",
    }, "out")
    assert res.ok
    assert isinstance(res.value, OutboundMovement)
    payload = res.value.to_payload()
    assert "unit_price" not in payload
    assert "expiration_date" not in payload
    assert payload["client_id"] == "C-9"
    assert payload["movement_type"] == "out"


def test_inbound_reports_bad_price_and_dates():
    res = validate_movement_draft({
        "quantity": "3",
        "movement_date": "2024-02-30",
        "unit_price": "-1",
        "expiration_date": "amanhã",
    }, "in")
    assert res.kinds() == {
        "movement_date": ErrorKind.INVALID_DATE,
        "unit_price": ErrorKind.OUT_OF_RANGE,
        "expiration_date": ErrorKind.INVALID_DATE,
    }


def test_missing_date():
    res = validate_movement_draft({"quantity": "1"}, "in")
    assert res.kinds() == {"movement_date": ErrorKind.MISSING_FIELD}


def test_new_draft_is_dated_today():
    draft = StockMovementDraft.new(date(2024, 5, 6))
    assert draft.movement_date == "2024-05-06"
    assert validate_movement_draft(StockMovementDraft(quantity="1", movement_date=draft.movement_date), "in").ok


def test_unknown_direction_is_programming_error():
    with pytest.raises(ValueError):
        validate_movement_draft({"quantity": "1"}, "sideways")


def _write_sheet(path: Path) -> Path:
    df = pd.DataFrame({
        "Quantidade": ["5", "0", "2"],
        "Data": ["2024-01-01", "2024-01-02", ""],
        "Lote": ["L1", "L2", "L3"],
        "Validade": ["2024-02-01", "", ""],
        "Preço Unitário": ["3.5", "", ""],
    })
    df.to_excel(path, index=False)
    return path


def test_movement_sheet_inbound(tmp_path: Path):
    path = _write_sheet(tmp_path / "entradas.xlsx")
    info = validate_movement_sheet(str(path), "in")
    assert info["tipo"] == "Entradas"
    assert info["total"] == 3
    assert info["sucessos"] == 1
    assert [(e["linha"], e["campo"]) for e in info["erros"]] == [(2, "quantity"), (3, "movement_date")]
    mov = info["movimentos"][0]
    assert mov["unit_price"] == Decimal("3.5")
    assert mov["batch_number"] == "L1"


def test_movement_sheet_outbound_from_csv(tmp_path: Path):
    path = tmp_path / "saidas.csv"
    path.write_text(
        "quantity,movement date,batch,unit price\n"
        "4,2024-01-05,L9,1.25\n"
        "1.5,2024-01-06,L10,\n",
        encoding="utf-8",
    )
    info = validate_movement_sheet(str(path), "out")
    assert info["tipo"] == "Saídas"
    assert info["sucessos"] == 2
    assert info["erros"] == []
    assert all("unit_price" not in m for m in info["movimentos"])


def test_movement_sheet_unsupported_format(tmp_path: Path):
    path = tmp_path / "entradas.txt"
    path.write_text("quantity\n1\n", encoding="utf-8")
    with pytest.raises(ValueError):
        validate_movement_sheet(str(path), "in")
