# laticinio/adapters/sheet_loader.py
"""
Loaders para planilhas (XLSX ou CSV) de MOVIMENTAÇÕES e COLETAS DE LEITE.

Essas funções:
- leem planilhas usando pandas, sempre como texto;
- normalizam cabeçalhos (acentos, variações, sinônimos em pt/en/fr);
- retornam listas de dicionários com as chaves dos formulários.

Observações:
- Não realizam validação nem conversão numérica: cada linha é um
  formulário cru, entregue aos validadores como se tivesse sido digitado.
- Células vazias viram None.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    # remove acentos básicos
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    # troca não alfanum por espaço
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _safe_get(row, key) -> Optional[str]:
    """Lê um valor da linha pandas tratando NA e strings vazias."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    s = str(val).strip()
    return s or None


_COMMON_ALIASES = {
    "quantidade": "quantity",
    "qtde": "quantity",
    "qtd": "quantity",
    "qty": "quantity",
    "quantite": "quantity",
    "quantity": "quantity",
    "litros": "quantity",
    "liters": "quantity",

    "fornecedor": "supplier_id",
    "supplier": "supplier_id",
    "supplier id": "supplier_id",
    "fournisseur": "supplier_id",

    "notas": "notes",
    "obs": "notes",
    "observacao": "notes",
    "notes": "notes",
}

_MOVEMENT_ALIASES = {
    "data": "movement_date",
    "date": "movement_date",
    "movement date": "movement_date",
    "data movimento": "movement_date",

    "lote": "batch_number",
    "batch": "batch_number",
    "batch number": "batch_number",
    "reference": "batch_number",

    "validade": "expiration_date",
    "data validade": "expiration_date",
    "expiration": "expiration_date",
    "expiration date": "expiration_date",

    "valor unitario": "unit_price",
    "preco": "unit_price",
    "preco unitario": "unit_price",
    "unit price": "unit_price",
    "prix unitaire": "unit_price",

    "cliente": "client_id",
    "client": "client_id",
    "client id": "client_id",
}

_COLLECTION_ALIASES = {
    "data": "collection_date",
    "date": "collection_date",
    "collection date": "collection_date",
    "data coleta": "collection_date",

    "temperatura": "temperature",
    "temperature": "temperature",
    "temp": "temperature",

    "gordura": "fat_content",
    "fat": "fat_content",
    "fat content": "fat_content",
    "densidade": "density",
    "density": "density",
    "ph": "ph",
    "proteina": "protein",
    "protein": "protein",
    "lactose": "lactose",
    "ccs": "somatic_cell_count",
    "somatic cell count": "somatic_cell_count",
    "cbt": "total_bacterial_count",
    "total bacterial count": "total_bacterial_count",
}


def _normalize_columns(df: pd.DataFrame, aliases: Dict[str, str]) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    merged = {**_COMMON_ALIASES, **aliases}
    new_cols = {}
    for col in df.columns:
        key = _slug(col)
        # se não houver alias, mantém slug com "_"
        new_cols[col] = merged.get(key, key.replace(" ", "_"))
    return df.rename(columns=new_cols)


def read_sheet(path: str) -> pd.DataFrame:
    """Lê XLSX/XLS ou CSV preservando tudo como string."""
    suffix = Path(path).suffix.lower()
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(path, dtype="string")
    if suffix == ".csv":
        return pd.read_csv(path, dtype="string", sep=None, engine="python")
    raise ValueError(f"unsupported sheet format: {suffix or path}")


def _rows(df: pd.DataFrame, keys) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        out.append({k: _safe_get(row, k) for k in keys})
    return out


# ---------------------------
# loaders públicos
# ---------------------------

MOVEMENT_KEYS = (
    "quantity", "movement_date", "batch_number", "expiration_date",
    "unit_price", "notes", "supplier_id", "client_id",
)

COLLECTION_KEYS = (
    "supplier_id", "collection_date", "quantity", "temperature",
    "fat_content", "density", "ph", "protein", "lactose",
    "somatic_cell_count", "total_bacterial_count", "notes",
)


def load_movements(path: str) -> List[Dict[str, Any]]:
    """Lê uma planilha de MOVIMENTAÇÕES de estoque.

    Campos de saída (chaves do dict por linha): ``MOVEMENT_KEYS``, todos
    ``str | None``.
    """
    df = _normalize_columns(read_sheet(path), _MOVEMENT_ALIASES)
    return _rows(df, MOVEMENT_KEYS)


def load_collections(path: str) -> List[Dict[str, Any]]:
    """Lê uma planilha de COLETAS DE LEITE.

    Os parâmetros de qualidade vêm achatados, como no payload.
    """
    df = _normalize_columns(read_sheet(path), _COLLECTION_ALIASES)
    return _rows(df, COLLECTION_KEYS)
