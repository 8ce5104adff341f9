# laticinio/domain/catalog.py
"""
Catálogo fechado de unidades e tipos usados nas listas de seleção.

Os valores aqui são exatamente os que o backend REST aceita; os
validadores recusam qualquer coisa fora destes conjuntos.
"""

from __future__ import annotations

from typing import Tuple

from laticinio.config import DEFAULTS


UNITS: Tuple[str, ...] = ("kg", "g", "L", "ml", "piece")

RAW_MATERIAL = "raw_material"
PRODUCT = "product"
ITEM_KINDS: Tuple[str, ...] = (RAW_MATERIAL, PRODUCT)
# Ingredientes usam os mesmos tipos dos itens
INGREDIENT_KINDS: Tuple[str, ...] = ITEM_KINDS

MOVEMENT_IN = "in"
MOVEMENT_OUT = "out"
MOVEMENT_DIRECTIONS: Tuple[str, ...] = (MOVEMENT_IN, MOVEMENT_OUT)

PRODUCT_TYPES: Tuple[str, ...] = tuple(DEFAULTS.product_types)

BATCH_PLANNED = "planned"
BATCH_IN_PROGRESS = "in_progress"
BATCH_COMPLETED = "completed"
BATCH_CANCELLED = "cancelled"
BATCH_STATUSES: Tuple[str, ...] = (
    BATCH_PLANNED,
    BATCH_IN_PROGRESS,
    BATCH_COMPLETED,
    BATCH_CANCELLED,
)

REPORT_PERIODS: Tuple[str, ...] = ("daily", "weekly", "monthly", "custom")


def label(value: str) -> str:
    """Rótulo legível: ``'raw_milk'`` → ``'Raw milk'``."""
    s = str(value).replace("_", " ")
    return s[:1].upper() + s[1:]
