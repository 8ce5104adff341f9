"""
Políticas de classificação de estoque e de ciclo de vida dos lotes.

Este módulo contém funções que encapsulam regras de negócio de
classificação do nível de estoque de um item e das transições de status
permitidas para um lote de produção. As funções aqui expostas são
utilizadas pela camada de aplicação e pela CLI.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from laticinio.domain.catalog import (
    BATCH_CANCELLED,
    BATCH_COMPLETED,
    BATCH_IN_PROGRESS,
    BATCH_PLANNED,
)


STOCK_LOW = "low"
STOCK_NORMAL = "normal"
STOCK_HIGH = "high"

_TRANSITIONS: Dict[str, Tuple[str, ...]] = {
    BATCH_PLANNED: (BATCH_IN_PROGRESS, BATCH_CANCELLED),
    BATCH_IN_PROGRESS: (BATCH_COMPLETED, BATCH_CANCELLED),
    BATCH_COMPLETED: (),
    BATCH_CANCELLED: (),
}


def _to_decimal(x: Any) -> Optional[Decimal]:
    if x is None or x == "":
        return None
    try:
        val = Decimal(str(x).replace(",", "."))
    except InvalidOperation:
        return None
    return val if val.is_finite() else None


def stock_status(current: Any, min_level: Any = None, max_level: Any = None) -> str:
    """Classifica o nível de estoque de um item.

    Regras:
        - ``current <= min_level`` → ``'low'``
        - ``current >= max_level`` → ``'high'``
        - caso contrário → ``'normal'``

    Níveis não definidos (``None``/vazio) são ignorados. Um estoque atual
    ilegível é tratado como zero.

    Args:
        current: Quantidade atual em estoque.
        min_level: Nível mínimo configurado.
        max_level: Nível máximo configurado.

    Returns:
        ``'low'``, ``'normal'`` ou ``'high'``.
    """
    cur = _to_decimal(current) or Decimal(0)
    lo = _to_decimal(min_level)
    hi = _to_decimal(max_level)
    if lo is not None and cur <= lo:
        return STOCK_LOW
    if hi is not None and cur >= hi:
        return STOCK_HIGH
    return STOCK_NORMAL


def next_statuses(current: str) -> Tuple[str, ...]:
    """Status para os quais um lote em ``current`` pode ir."""
    if current not in _TRANSITIONS:
        raise ValueError(f"unknown batch status: {current!r}")
    return _TRANSITIONS[current]


def can_transition(current: str, target: str) -> bool:
    return target in next_statuses(current)
