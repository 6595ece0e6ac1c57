"""
Configuração de logging estruturado usando structlog.
Gera logs em formato JSON para produção e colorido para desenvolvimento.

Cada execução do job vincula run_id e trigger via contextvars; todas as
mensagens emitidas durante a execução (runner, scrapers, watchdog) carregam
esses campos.
"""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
from uuid import uuid4

import structlog
from structlog.typing import Processor


LOG_FILE_NAME = "pricewatch.log"

# Bibliotecas ruidosas: só WARNING, exceto em DEBUG
NOISY_LOGGERS = ("apscheduler", "aiosqlite", "asyncio")


def setup_logging(
    level: str = "INFO",
    log_path: Optional[Path] = None,
    json_format: bool = False,
) -> structlog.BoundLogger:
    """
    Configura o sistema de logging.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR)
        log_path: Diretório do arquivo pricewatch.log (None = só stdout)
        json_format: Se True, usa formato JSON (produção)

    Returns:
        Logger configurado
    """
    log_level = getattr(logging, level.upper())

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        renderer: Processor = structlog.processors.JSONRenderer()
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ]
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
        processors = [*shared_processors, renderer]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # apscheduler e aiosqlite usam logging padrão: mesmo formato via ProcessorFormatter
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(colors=False),
        ],
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_path:
        log_path.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path / LOG_FILE_NAME, encoding="utf-8"))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        root.addHandler(handler)
    root.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(
            log_level if log_level <= logging.DEBUG else logging.WARNING
        )

    return structlog.get_logger()


def get_logger(name: str = "pricewatch", **context) -> structlog.BoundLogger:
    """
    Retorna um logger com contexto.

    Args:
        name: Nome do logger
        **context: Contexto adicional para bind

    Returns:
        Logger com contexto
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger


@contextmanager
def run_context(**context) -> Iterator[str]:
    """
    Vincula um run_id (e o contexto extra) a todos os logs do bloco.

    Yields:
        run_id gerado
    """
    run_id = uuid4().hex[:8]
    with structlog.contextvars.bound_contextvars(run_id=run_id, **context):
        yield run_id


class LoggerMixin:
    """Mixin para adicionar logging a classes."""

    @property
    def logger(self) -> structlog.BoundLogger:
        """Retorna logger com nome da classe."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger

    def log_operation(
        self,
        operation: str,
        **kwargs,
    ) -> structlog.BoundLogger:
        """Retorna logger com operação bindada."""
        return self.logger.bind(operation=operation, **kwargs)
