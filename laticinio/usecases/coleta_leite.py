"""
UC: COLETA DE LEITE (registro, fornecedores e resumo do relatório).

- validação do formulário de coleta (quantidade em litros, temperatura e
  parâmetros de qualidade);
- validação do cadastro de fornecedor;
- intervalo de datas do relatório (diário, semanal, mensal);
- resumo das coletas (totais e médias) com pandas.
"""
from __future__ import annotations

import calendar
import re
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from laticinio.adapters.parsers import FieldReader, parse_date, parse_reference
from laticinio.adapters.sheet_loader import load_collections
from laticinio.domain.catalog import REPORT_PERIODS
from laticinio.domain.errors import ErrorKind, ValidationResult
from laticinio.domain.formulas import round2
from laticinio.domain.models import (
    MilkCollectionDraft,
    QualityParams,
    SupplierDraft,
    ValidatedCollection,
    ValidatedSupplier,
)
from laticinio.infra.logger import log_file_operation, log_system_event, log_validation


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# (mínimo, máximo) de cada parâmetro decimal de qualidade
_QUALITY_RANGES = {
    "fat_content": (Decimal("0"), Decimal("100")),
    "density": (Decimal("0"), None),
    "ph": (Decimal("0"), Decimal("14")),
    "protein": (Decimal("0"), None),
    "lactose": (Decimal("0"), None),
}


# ----------------------
# formulários
# ----------------------

def validate_collection_draft(
    draft: Union[MilkCollectionDraft, Mapping[str, Any]],
) -> ValidationResult[ValidatedCollection]:
    """Valida uma coleta; erros de qualidade usam o nome do parâmetro."""
    d = draft if isinstance(draft, MilkCollectionDraft) else MilkCollectionDraft.from_form(draft)
    form = d.as_form()
    form.update(form.pop("quality_params"))
    r = FieldReader(form)

    supplier_id = r.reference("supplier_id", required=True, message="Supplier is required")
    collection_date = r.date("collection_date", required=True, message="Collection date is required")
    quantity = r.quantity("quantity", message="Quantity (liters) must be greater than zero")
    temperature = r.decimal("temperature", minimum=None)
    quality = {k: r.decimal(k, minimum=lo, maximum=hi) for k, (lo, hi) in _QUALITY_RANGES.items()}
    quality["somatic_cell_count"] = r.integer("somatic_cell_count")
    quality["total_bacterial_count"] = r.integer("total_bacterial_count")
    notes = r.text("notes")

    if r.errors:
        log_validation("milk_collection", r.errors)
        return ValidationResult.failure(r.errors)

    collection = ValidatedCollection(
        supplier_id=supplier_id,
        collection_date=collection_date,
        quantity=quantity,
        temperature=temperature,
        quality=QualityParams(**quality),
        notes=notes,
    )
    log_validation("milk_collection", payload=collection.to_payload())
    return ValidationResult.success(collection)


def validate_supplier_draft(draft: Union[SupplierDraft, Mapping[str, Any]]) -> ValidationResult[ValidatedSupplier]:
    d = draft if isinstance(draft, SupplierDraft) else SupplierDraft.from_form(draft)
    r = FieldReader(d.as_form())
    name = r.text("name", required=True, message="Supplier name is required")
    email = r.text("email")
    if email is not None and not _EMAIL_RE.match(email):
        r.error("email", ErrorKind.INVALID_FORMAT, "email must look like name@domain.tld")
    if r.errors:
        log_validation("supplier", r.errors)
        return ValidationResult.failure(r.errors)
    supplier = ValidatedSupplier(
        name=name,
        contact_person=r.text("contact_person"),
        phone=r.text("phone"),
        email=email,
        address=r.text("address"),
    )
    log_validation("supplier", payload=supplier.to_payload())
    return ValidationResult.success(supplier)


# ----------------------
# relatório
# ----------------------

def report_period_range(
    period: str,
    today: Optional[date] = None,
    start: Any = None,
    end: Any = None,
) -> Tuple[date, date]:
    """Intervalo (início, fim) inclusivo do relatório de coletas.

    - ``daily``: hoje;
    - ``weekly``: domingo a sábado da semana de hoje;
    - ``monthly``: primeiro ao último dia do mês;
    - ``custom``: ``start``/``end`` informados (padrão: hoje).

    Raises:
        ValueError: período desconhecido ou ``start > end``.
    """
    if period not in REPORT_PERIODS:
        raise ValueError(f"unknown report period: {period!r}")
    today = today or date.today()
    if period == "daily":
        return today, today
    if period == "weekly":
        # weekday(): segunda=0 ... domingo=6
        first = today - timedelta(days=(today.weekday() + 1) % 7)
        return first, first + timedelta(days=6)
    if period == "monthly":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    first = parse_date(start) or today
    last = parse_date(end) or today
    if first > last:
        raise ValueError("start date must not be after end date")
    return first, last


def filter_collections(
    records: Iterable[Mapping[str, Any]],
    start: Optional[date],
    end: Optional[date],
    supplier_id: Any = None,
) -> List[Mapping[str, Any]]:
    """Mantém as coletas do intervalo (e do fornecedor, se informado).

    Sem ``start``/``end`` o intervalo não é aplicado. Com intervalo,
    registros com data ilegível são descartados.
    """
    wanted = parse_reference(supplier_id) if supplier_id not in (None, "", "all") else None
    bounded = start is not None or end is not None
    out = []
    for rec in records:
        if bounded:
            try:
                d = parse_date(rec.get("collection_date"))
            except ValueError:
                continue
            if d is None:
                continue
            if (start is not None and d < start) or (end is not None and d > end):
                continue
        if wanted is not None and parse_reference(rec.get("supplier_id")) != wanted:
            continue
        out.append(rec)
    return out


def _dec(x: float) -> Decimal:
    return round2(Decimal(str(x)))


def summarize_collections(records: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Totais e médias das coletas.

    Valores ausentes ou ilegíveis contam como zero, inclusive nas médias.

    Returns:
        ``{"total_collections", "total_quantity", "avg_fat",
        "avg_temperature", "by_supplier"}``; ``by_supplier`` lista
        ``{"supplier_id", "collections", "quantity"}``.
    """
    df = pd.DataFrame(list(records))
    n = len(df)
    if n == 0:
        zero = _dec(0)
        return {
            "total_collections": 0,
            "total_quantity": zero,
            "avg_fat": zero,
            "avg_temperature": zero,
            "by_supplier": [],
        }

    def numeric(col: str) -> pd.Series:
        if col not in df.columns:
            return pd.Series([0.0] * n, index=df.index)
        return pd.to_numeric(df[col].astype(str).str.replace(",", ".", regex=False), errors="coerce").fillna(0.0)

    qty = numeric("quantity")
    by_supplier: List[Dict[str, Any]] = []
    if "supplier_id" in df.columns:
        grouped = (
            pd.DataFrame({"supplier_id": df["supplier_id"].astype("string"), "quantity": qty})
            .groupby("supplier_id", dropna=True)["quantity"]
            .agg(["count", "sum"])
            .sort_values("sum", ascending=False)
        )
        for sid, row in grouped.iterrows():
            by_supplier.append({
                "supplier_id": parse_reference(sid),
                "collections": int(row["count"]),
                "quantity": _dec(row["sum"]),
            })

    return {
        "total_collections": n,
        "total_quantity": _dec(qty.sum()),
        "avg_fat": _dec(numeric("fat_content").sum() / n),
        "avg_temperature": _dec(numeric("temperature").sum() / n),
        "by_supplier": by_supplier,
    }


def summarize_collection_sheet(
    path: str,
    period: str = "custom",
    today: Optional[date] = None,
    start: Any = None,
    end: Any = None,
    supplier_id: Any = None,
) -> Dict[str, Any]:
    """Lê uma planilha de coletas, filtra pelo período e resume."""
    rows = load_collections(path)
    log_file_operation("import", path, rows_processed=len(rows))
    first = last = None
    # "custom" sem datas resume a planilha inteira
    if not (period == "custom" and start is None and end is None):
        first, last = report_period_range(period, today=today, start=start, end=end)
    selected = filter_collections(rows, first, last, supplier_id=supplier_id)
    summary = summarize_collections(selected)
    summary["start_date"] = first
    summary["end_date"] = last
    log_system_event("collection_summary", {"file_path": path, "records": summary["total_collections"]})
    return summary
