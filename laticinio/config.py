# laticinio/config.py
"""
Configurações globais e valores padrão do sistema do laticínio.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple


# Diretório dos arquivos de log (pode ser trocado por variável de ambiente)
LOGS_DIR = Path(os.environ.get("LATICINIO_LOG_DIR", os.path.join(os.getcwd(), "logs")))


def _env_flag(name: str, default: bool = False) -> bool:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "t", "sim", "s", "y", "yes", "on"}


@dataclass
class DefaultConfig:
    """Valores padrão usados pelos formulários."""
    default_unit: str = "kg"
    price_places: int = 2          # casas decimais dos preços derivados
    max_tax_rate: int = 100        # taxa em %, inclusive
    max_price: int = 10 ** 12      # teto dos preços digitados
    batch_prefix: str = "B"
    product_types: Tuple[str, ...] = field(
        default_factory=lambda: ("raw_milk", "pasteurized_milk", "cheese", "yogurt", "other")
    )
    logging_enabled: bool = field(default_factory=lambda: _env_flag("LATICINIO_LOGGING"))
    output_enabled: bool = field(default_factory=lambda: _env_flag("LATICINIO_OUTPUT"))


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
