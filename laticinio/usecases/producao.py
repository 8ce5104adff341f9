"""
UC: Lotes de PRODUÇÃO (criação, conclusão e mudança de status).
"""
from __future__ import annotations

import random
from datetime import date
from typing import Any, Mapping, Optional, Union

from laticinio.config import DEFAULTS
from laticinio.adapters.parsers import FieldReader
from laticinio.domain.catalog import BATCH_STATUSES
from laticinio.domain.errors import ErrorKind, FieldError, ValidationResult
from laticinio.domain.models import BatchDraft, ValidatedBatch
from laticinio.domain.policies import can_transition, next_statuses
from laticinio.infra.logger import log_system_event, log_validation


BatchInput = Union[BatchDraft, Mapping[str, Any]]


def generate_batch_number(today: Optional[date] = None, rng: Optional[random.Random] = None) -> str:
    """Gera um número de lote no formato ``B-YYYYMMDD-NNNN``."""
    today = today or date.today()
    rng = rng or random.Random()
    return f"{DEFAULTS.batch_prefix}-{today:%Y%m%d}-{rng.randint(0, 9999):04d}"


def new_batch_draft(recipe_id: Any = "", today: Optional[date] = None) -> BatchDraft:
    """Formulário novo: número gerado e data de início hoje."""
    today = today or date.today()
    return BatchDraft(
        recipe_id="" if recipe_id is None else str(recipe_id),
        batch_number=generate_batch_number(today),
        start_date=today.isoformat(),
    )


def validate_batch_draft(draft: BatchInput) -> ValidationResult[ValidatedBatch]:
    d = draft if isinstance(draft, BatchDraft) else BatchDraft.from_form(draft)
    r = FieldReader(d.as_form())

    recipe_id = r.reference("recipe_id", required=True, message="Recipe is required")
    batch_number = r.text("batch_number", required=True, message="Batch number is required")
    planned = r.quantity("planned_quantity", message="Planned quantity must be greater than zero")
    start_date = r.date("start_date", required=True, message="Start date is required")
    supervisor_id = r.reference("supervisor_id")
    notes = r.text("notes")

    if r.errors:
        log_validation("batch", r.errors)
        return ValidationResult.failure(r.errors)

    batch = ValidatedBatch(
        recipe_id=recipe_id,
        batch_number=batch_number,
        planned_quantity=planned,
        start_date=start_date,
        supervisor_id=supervisor_id,
        notes=notes,
    )
    log_validation("batch", payload=batch.to_payload())
    return ValidationResult.success(batch)


def validate_batch_completion(actual_quantity: Any):
    """Valida a quantidade produzida informada ao concluir um lote.

    Returns:
        ``ValidationResult`` com ``{"actual_quantity": Decimal}``.
    """
    r = FieldReader({"actual_quantity": actual_quantity})
    qty = r.quantity("actual_quantity", message="Actual quantity must be greater than zero")
    if r.errors:
        log_validation("batch_completion", r.errors)
        return ValidationResult.failure(r.errors)
    return ValidationResult.success({"actual_quantity": qty})


def check_batch_transition(current: str, target: str) -> ValidationResult[str]:
    """Confere se um lote pode passar de ``current`` para ``target``."""
    for name, val in (("status", current), ("target", target)):
        if val not in BATCH_STATUSES:
            return ValidationResult.failure({
                name: FieldError(ErrorKind.INVALID_CHOICE, f"{name} must be one of: {', '.join(BATCH_STATUSES)}")
            })
    if not can_transition(current, target):
        allowed = ", ".join(next_statuses(current)) or "none"
        log_system_event("batch_transition_rejected", {"from": current, "to": target}, level="warning")
        return ValidationResult.failure({
            "status": FieldError(
                ErrorKind.INVALID_TRANSITION,
                f"Cannot move a {current} batch to {target} (allowed: {allowed})",
            )
        })
    return ValidationResult.success(target)
