"""
UC: Validar MOVIMENTAÇÕES de estoque (entrada e saída), única e em lote.

Obs.:
- Preço unitário e validade só existem em ENTRADAS. Numa saída esses
  campos são descartados antes da validação (e registrados no log),
  nunca convertidos para zero.
- Fornecedor/cliente são aceitos como vierem; conferir se pertencem ao
  catálogo é responsabilidade do backend.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union

from laticinio.adapters.parsers import FieldReader, normalize_str
from laticinio.adapters.sheet_loader import load_movements
from laticinio.domain.catalog import MOVEMENT_DIRECTIONS, MOVEMENT_IN, MOVEMENT_OUT
from laticinio.domain.errors import ValidationResult
from laticinio.domain.models import (
    InboundMovement,
    OutboundMovement,
    StockMovementDraft,
    ValidatedMovement,
)
from laticinio.infra.logger import (
    log_dropped_fields,
    log_file_operation,
    log_system_event,
    log_validation,
)


MovementInput = Union[StockMovementDraft, Mapping[str, Any]]

INBOUND_ONLY = ("unit_price", "expiration_date")


def validate_movement_draft(draft: MovementInput, direction: str) -> ValidationResult[ValidatedMovement]:
    """Valida uma movimentação no sentido ``direction`` (``'in'``/``'out'``).

    Raises:
        ValueError: se ``direction`` não for um sentido conhecido.
    """
    if direction not in MOVEMENT_DIRECTIONS:
        raise ValueError(f"unknown movement direction: {direction!r}")
    d = draft if isinstance(draft, StockMovementDraft) else StockMovementDraft.from_form(draft)
    form = d.as_form()

    if direction == MOVEMENT_OUT:
        dropped = {k: form.pop(k) for k in INBOUND_ONLY}
        dropped = {k: v for k, v in dropped.items() if normalize_str(v) is not None}
        log_dropped_fields("movement", dropped, reason="not applicable to outbound movements")

    r = FieldReader(form)
    quantity = r.quantity("quantity", message="Quantity must be greater than zero")
    movement_date = r.date("movement_date", required=True, message="Movement date is required")
    base = dict(
        batch_number=r.text("batch_number"),
        notes=r.text("notes"),
        supplier_id=r.reference("supplier_id"),
        client_id=r.reference("client_id"),
    )
    if direction == MOVEMENT_IN:
        unit_price = r.decimal("unit_price")
        expiration_date = r.date("expiration_date")

    if r.errors:
        log_validation("movement", r.errors, direction=direction)
        return ValidationResult.failure(r.errors)

    if direction == MOVEMENT_IN:
        movement = InboundMovement(
            quantity=quantity,
            movement_date=movement_date,
            unit_price=unit_price,
            expiration_date=expiration_date,
            **base,
        )
    else:
        movement = OutboundMovement(quantity=quantity, movement_date=movement_date, **base)
    log_validation("movement", payload=movement.to_payload(), direction=direction)
    return ValidationResult.success(movement)


def validate_movement_sheet(path: str, direction: str) -> Dict[str, Any]:
    """Lê uma planilha de movimentações e valida todas as linhas.

    Returns:
        ``{"arquivo", "tipo", "total", "sucessos", "erros", "movimentos"}``,
        onde ``erros`` lista ``{"linha", "campo", "mensagem"}`` (linha 1 é
        a primeira linha de dados) e ``movimentos`` os payloads válidos.
    """
    if direction not in MOVEMENT_DIRECTIONS:
        raise ValueError(f"unknown movement direction: {direction!r}")
    log_system_event("movement_sheet_start", {"file_path": path, "direction": direction})

    try:
        rows = load_movements(path)
    except Exception as e:
        log_system_event("movement_sheet_error", {"file_path": path, "error": str(e)}, level="error")
        raise
    log_file_operation("import", path, rows_processed=len(rows))

    movimentos: List[Dict[str, Any]] = []
    erros: List[Dict[str, Any]] = []
    for i, row in enumerate(rows, start=1):
        res = validate_movement_draft(row, direction)
        if res.ok:
            movimentos.append(res.value.to_payload())
            continue
        for campo, err in res.errors.items():
            erros.append({"linha": i, "campo": campo, "mensagem": f"{campo}: {err.message}"})

    result = {
        "arquivo": path,
        "tipo": "Entradas" if direction == MOVEMENT_IN else "Saídas",
        "total": len(rows),
        "sucessos": len(movimentos),
        "erros": erros,
        "movimentos": movimentos,
    }
    log_system_event(
        "movement_sheet_done",
        {"file_path": path, "total": len(rows), "ok": len(movimentos), "errors": len(erros)},
    )
    return result
