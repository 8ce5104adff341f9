"""
Utilidades de parsing para os campos crus dos formulários.

Os formulários entregam tudo como string. Este módulo concentra a
convenção "string vazia significa ausente" e a conversão para os tipos
do domínio (``Decimal``, ``int``, ``date``, referências de catálogo),
de modo que os validadores nunca repitam essa lógica campo a campo.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

from laticinio.domain.errors import ErrorKind, FieldError, FieldErrors
from laticinio.domain.models import Reference

_INT_RE = re.compile(r"^[-+]?\d+$")
_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y")


def normalize_str(x: Any) -> Optional[str]:
    """Converte o valor em string aparada; vazio/None/NaN → None."""
    if x is None:
        return None
    if isinstance(x, float) and math.isnan(x):
        return None
    s = str(x).strip()
    return s or None


def parse_decimal(txt: Any) -> Optional[Decimal]:
    """Interpreta um número decimal.

    Aceita ponto ou vírgula como separador decimal ("3.5", "3,5").
    Valores ausentes retornam ``None``.

    Raises:
        ValueError: se o texto não-vazio não for um número finito.
    """
    if isinstance(txt, Decimal):
        if not txt.is_finite():
            raise ValueError(f"not a finite number: {txt!r}")
        return txt
    s = normalize_str(txt)
    if s is None:
        return None
    if "," in s and "." not in s:
        s = s.replace(",", ".")
    try:
        val = Decimal(s)
    except InvalidOperation:
        raise ValueError(f"not a number: {txt!r}") from None
    if not val.is_finite():
        raise ValueError(f"not a finite number: {txt!r}")
    return val


def parse_int(txt: Any) -> Optional[int]:
    """Interpreta um inteiro; "12.0" é aceito, "12.5" não."""
    val = parse_decimal(txt)
    if val is None:
        return None
    if val != val.to_integral_value():
        raise ValueError(f"not an integer: {txt!r}")
    return int(val)


def parse_date(txt: Any) -> Optional[date]:
    """Interpreta uma data em ``YYYY-MM-DD`` ou ``DD/MM/AAAA``.

    Objetos ``date``/``datetime`` (inclusive ``pandas.Timestamp``) são
    aceitos diretamente.
    """
    if isinstance(txt, datetime):
        return txt.date()
    if isinstance(txt, date):
        return txt
    s = normalize_str(txt)
    if s is None:
        return None
    # planilhas costumam trazer "2024-01-01 00:00:00"
    s = s.split("T", 1)[0].split(" ", 1)[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"not a date: {txt!r}")


def parse_reference(txt: Any) -> Optional[Reference]:
    """Identificador de catálogo: inteiro quando numérico, senão a string."""
    if isinstance(txt, bool):
        raise ValueError(f"not a reference: {txt!r}")
    if isinstance(txt, int):
        return txt
    if isinstance(txt, float) and not math.isnan(txt) and txt.is_integer():
        return int(txt)
    s = normalize_str(txt)
    if s is None:
        return None
    if _INT_RE.match(s):
        return int(s)
    return s


class FieldReader:
    """Lê campos crus de um mapeamento acumulando erros por campo.

    Cada método devolve o valor tipado (ou ``None``) e, em caso de
    problema, registra um ``FieldError`` em ``errors``. Apenas o primeiro
    erro de cada campo é mantido.
    """

    def __init__(self, fields: Mapping[str, Any], prefix: str = ""):
        self.fields = fields
        self.prefix = prefix
        self.errors: FieldErrors = {}

    def _key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def error(self, name: str, kind: ErrorKind, message: str) -> None:
        self.errors.setdefault(self._key(name), FieldError(kind, message))

    def has_error(self, name: str) -> bool:
        return self._key(name) in self.errors

    def raw(self, name: str) -> Any:
        return self.fields.get(name)

    def text(self, name: str, required: bool = False, message: Optional[str] = None) -> Optional[str]:
        val = normalize_str(self.raw(name))
        if val is None and required:
            self.error(name, ErrorKind.MISSING_FIELD, message or f"{name} is required")
        return val

    def choice(
        self,
        name: str,
        options: Iterable[str],
        required: bool = False,
        message: Optional[str] = None,
    ) -> Optional[str]:
        val = self.text(name, required=required, message=message)
        if val is None:
            return None
        opts = tuple(options)
        if val not in opts:
            self.error(name, ErrorKind.INVALID_CHOICE, f"{name} must be one of: {', '.join(opts)}")
            return None
        return val

    def decimal(
        self,
        name: str,
        required: bool = False,
        minimum: Optional[Decimal] = Decimal("0"),
        maximum: Optional[Decimal] = None,
        message: Optional[str] = None,
    ) -> Optional[Decimal]:
        try:
            val = parse_decimal(self.raw(name))
        except ValueError:
            self.error(name, ErrorKind.INVALID_NUMBER, f"{name} must be a valid number")
            return None
        if val is None:
            if required:
                self.error(name, ErrorKind.MISSING_FIELD, message or f"{name} is required")
            return None
        if minimum is not None and val < minimum:
            self.error(name, ErrorKind.OUT_OF_RANGE, f"{name} must be at least {minimum}")
            return None
        if maximum is not None and val > maximum:
            self.error(name, ErrorKind.OUT_OF_RANGE, f"{name} must be at most {maximum}")
            return None
        return val

    def integer(self, name: str, required: bool = False, minimum: Optional[int] = 0) -> Optional[int]:
        try:
            val = parse_int(self.raw(name))
        except ValueError:
            self.error(name, ErrorKind.INVALID_NUMBER, f"{name} must be a whole number")
            return None
        if val is None:
            if required:
                self.error(name, ErrorKind.MISSING_FIELD, f"{name} is required")
            return None
        if minimum is not None and val < minimum:
            self.error(name, ErrorKind.OUT_OF_RANGE, f"{name} must be at least {minimum}")
            return None
        return val

    def quantity(
        self,
        name: str,
        missing_kind: ErrorKind = ErrorKind.INVALID_QUANTITY,
        invalid_kind: ErrorKind = ErrorKind.INVALID_QUANTITY,
        message: Optional[str] = None,
    ) -> Optional[Decimal]:
        """Quantidade estritamente positiva.

        Ausente gera ``missing_kind``; não-numérica ou ``<= 0`` gera
        ``invalid_kind``.
        """
        msg = message or f"Valid {name.replace('_', ' ')} is required"
        try:
            val = parse_decimal(self.raw(name))
        except ValueError:
            self.error(name, invalid_kind, msg)
            return None
        if val is None:
            self.error(name, missing_kind, msg)
            return None
        if val <= 0:
            self.error(name, invalid_kind, msg)
            return None
        return val

    def date(self, name: str, required: bool = False, message: Optional[str] = None) -> Optional[date]:
        try:
            val = parse_date(self.raw(name))
        except ValueError:
            self.error(name, ErrorKind.INVALID_DATE, f"{name} must be a date (YYYY-MM-DD)")
            return None
        if val is None and required:
            self.error(name, ErrorKind.MISSING_FIELD, message or f"{name} is required")
        return val

    def reference(
        self,
        name: str,
        required: bool = False,
        kind: ErrorKind = ErrorKind.MISSING_FIELD,
        message: Optional[str] = None,
    ) -> Optional[Reference]:
        try:
            val = parse_reference(self.raw(name))
        except ValueError:
            val = None
        if val is None and required:
            self.error(name, kind, message or f"{name} is required")
        return val
