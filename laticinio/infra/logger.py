# laticinio/infra/logger.py
"""
Sistema de logging das validações do laticínio.

Este módulo configura e fornece loggers para registrar as operações
relevantes do sistema: validações de formulário, cálculos de preço,
leitura de planilhas e eventos gerais.

Os arquivos só são criados no primeiro registro efetivo; com as flags
desligadas nenhuma função toca o disco.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from laticinio.config import DEFAULTS, LOGS_DIR


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = DEFAULTS.logging_enabled
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = DEFAULTS.output_enabled

def print_system(*args, **kwargs):
    """Print controlado pelo ENABLE_OUTPUT."""
    if ENABLE_OUTPUT:
        print(*args, **kwargs)

# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LOG_FILES = {
    "validation": "validation.log",
    "pricing": "pricing.log",
    "system": "system.log",
}

_loggers: Dict[str, logging.Logger] = {}


def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger específico com arquivo de saída.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configurado
    """
    # Cria o diretório de logs se não existir
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Remove handlers anteriores (reconfiguração)
    while logger.handlers:
        old = logger.handlers[0]
        logger.removeHandler(old)
        old.close()

    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


def get_logger(kind: str) -> logging.Logger:
    """Logger de um tipo (validation, pricing, system), criado sob demanda."""
    if kind not in LOG_FILES:
        raise ValueError(f"unknown log type: {kind!r}")
    if kind not in _loggers:
        _loggers[kind] = setup_logger(
            f"laticinio.{kind}",
            str(Path(LOGS_DIR) / LOG_FILES[kind]),
            level=logging.DEBUG,
        )
    return _loggers[kind]


def _enabled() -> bool:
    return ENABLE_LOGGING or ENABLE_OUTPUT


def log_validation(
    form: str,
    errors: Optional[Dict[str, Any]] = None,
    payload: Optional[Dict[str, Any]] = None,
    **kwargs,
) -> None:
    """
    Registra o resultado de uma validação de formulário.

    Args:
        form: Tipo do formulário (item, recipe, ingredient, movement...)
        errors: Mapa campo -> erro (vazio/None quando ok)
        payload: Payload validado (opcional)
        **kwargs: Dados adicionais (contexto: tipo do item, direção...)
    """
    if not _enabled():
        return
    logger = get_logger("validation")
    if errors:
        detail = {k: str(v) for k, v in errors.items()}
        logger.warning(f"VALIDATION_FAILED: {form} - Errors: {detail} - Context: {kwargs}")
    else:
        logger.info(f"VALIDATION_OK: {form} - Payload: {payload} - Context: {kwargs}")


def log_dropped_fields(form: str, fields: Dict[str, Any], reason: str) -> None:
    """Registra campos descartados por não se aplicarem ao contexto."""
    if not _enabled() or not fields:
        return
    get_logger("validation").debug(f"FIELDS_DROPPED: {form} - {reason} - {fields}")


def log_pricing(item_kind: str, before: Dict[str, Any], after: Dict[str, Any]) -> None:
    """
    Registra um recálculo de preços derivados.

    Args:
        item_kind: Tipo do item (product, raw_material)
        before: Preços antes do cálculo
        after: Preços depois do cálculo
    """
    if not _enabled():
        return
    changed = {k: (before.get(k), v) for k, v in after.items() if before.get(k) != v}
    get_logger("pricing").info(f"PRICING_{item_kind.upper()}: changed={changed}")


def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """
    Log para eventos do sistema.

    Args:
        event: Descrição do evento
        details: Detalhes adicionais (opcional)
        level: Nível do log (info, warning, error)
    """
    if not _enabled():
        return
    log_data = {
        "event": event,
        "details": details or {}
    }
    logger = get_logger("system")
    log_method = getattr(logger, level.lower(), logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """
    Log para operações de arquivo (importação de planilhas).

    Args:
        operation: Tipo de operação (import, export)
        file_path: Caminho do arquivo
        rows_processed: Número de linhas processadas
        **kwargs: Dados adicionais
    """
    if not _enabled():
        return
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        "at": datetime.now().isoformat(),
        **kwargs
    }
    get_logger("system").info(f"FILE_{operation.upper()}: {log_data}")


def get_log_summary(log_type: str = "validation", lines: int = 100) -> Optional[str]:
    """
    Obtém um resumo dos logs recentes.

    Args:
        log_type: Tipo de log (validation, pricing, system)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string
    """
    if not _enabled():
        return None

    name = LOG_FILES.get(log_type)
    log_file = Path(LOGS_DIR) / name if name else None
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    try:
        with open(log_file, 'r', encoding='utf-8') as f:
            all_lines = f.readlines()
            recent_lines = all_lines[-lines:] if len(all_lines) > lines else all_lines
            return ''.join(recent_lines)
    except OSError as e:
        return f"Erro ao ler log {log_type}: {str(e)}"
