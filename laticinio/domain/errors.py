# laticinio/domain/errors.py
"""
Taxonomia de erros de validação dos formulários.

Nenhum destes erros é lançado como exceção: os validadores devolvem um
``ValidationResult`` com o mapa ``campo -> FieldError`` e o chamador
decide o que exibir ao lado de cada campo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Generic, Optional, TypeVar


class ErrorKind(str, Enum):
    MISSING_FIELD = "MissingField"
    INVALID_NUMBER = "InvalidNumber"
    INVALID_QUANTITY = "InvalidQuantity"
    EMPTY_COMPOSITION = "EmptyComposition"
    MISSING_REFERENCE = "MissingReference"
    OUT_OF_RANGE = "OutOfRange"
    INVALID_CHOICE = "InvalidChoice"
    INVALID_DATE = "InvalidDate"
    INVALID_TRANSITION = "InvalidTransition"
    INVALID_FORMAT = "InvalidFormat"


@dataclass(frozen=True)
class FieldError:
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


FieldErrors = Dict[str, FieldError]

T = TypeVar("T")


@dataclass
class ValidationResult(Generic[T]):
    """Resultado de uma validação: ``value`` quando ok, ``errors`` caso contrário."""
    value: Optional[T] = None
    errors: FieldErrors = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @classmethod
    def success(cls, value: T) -> "ValidationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, errors: FieldErrors) -> "ValidationResult[T]":
        if not errors:
            raise ValueError("failure requires at least one field error")
        return cls(errors=dict(errors))

    def kinds(self) -> Dict[str, ErrorKind]:
        """Atalho útil nos testes e na CLI: ``campo -> tipo de erro``."""
        return {k: e.kind for k, e in self.errors.items()}

    def messages(self) -> Dict[str, str]:
        return {k: e.message for k, e in self.errors.items()}
