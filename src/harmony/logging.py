"""Structured logging para o Harmony.

Usa structlog com stdlib logging como backend. Dois formatos:
- console: legivel para desenvolvimento (default)
- json: estruturado para producao

Contexto por stream (stream_id, sequence) e propagado via contextvars,
entao workers do StreamPool nao precisam repassar o logger adiante.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterator

_LOG_FORMATS = ("console", "json")

_configured = False


def configure_logging(
    log_format: str | None = None,
    level: str | None = None,
) -> None:
    """Configura logging estruturado do nucleo de audio.

    Idempotente — chamadas subsequentes sao ignoradas.

    Args:
        log_format: "json" ou "console". Default via HARMONY_LOG_FORMAT env ou "console".
        level: Nivel de log (DEBUG, INFO, WARNING, ERROR).
            Default via HARMONY_LOG_LEVEL env ou "WARNING".
    """
    global _configured
    if _configured:
        return

    resolved_format = (log_format or os.environ.get("HARMONY_LOG_FORMAT", "console")).lower()
    resolved_level = level or os.environ.get("HARMONY_LOG_LEVEL", "WARNING")
    if resolved_format not in _LOG_FORMATS:
        resolved_format = "console"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    renderer: structlog.types.Processor
    if resolved_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    # Apenas o logger "harmony": o nucleo e embutido em aplicacoes que
    # configuram o root logger por conta propria.
    harmony_logger = logging.getLogger("harmony")
    harmony_logger.handlers.clear()
    harmony_logger.addHandler(handler)
    harmony_logger.setLevel(getattr(logging, resolved_level.upper(), logging.WARNING))
    harmony_logger.propagate = False

    _configured = True


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Retorna logger com contexto de componente.

    Args:
        component: Nome do componente (ex: "pipeline.orchestrator", "streaming.pool").

    Returns:
        BoundLogger com campo component vinculado.
    """
    configure_logging()
    return structlog.get_logger(f"harmony.{component}").bind(component=component)  # type: ignore[no-any-return]


@contextmanager
def bound_context(**values: Any) -> Iterator[None]:
    """Vincula campos ao contexto de log da thread/task atual.

    Usado pelos workers de streaming para marcar todos os eventos de um
    frame com stream_id e sequence.
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield
