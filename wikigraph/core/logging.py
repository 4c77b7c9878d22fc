"""
structlog setup.

Our structlog loggers and third-party stdlib loggers (uvicorn, SQLAlchemy)
share one stdout handler and one renderer: a console renderer by default,
JSON lines when LOG_FORMAT=json.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from wikigraph.core.config import settings

# Third-party loggers and the level they are capped at
QUIET_LOGGERS: dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn.access": logging.WARNING,
    "aiosqlite": logging.WARNING,
}

# Applied to structlog events and to foreign stdlib records alike
PRE_CHAIN: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _stdout_handler(log_format: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )
    return handler


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        level: Overrides LOG_LEVEL
        log_format: Overrides LOG_FORMAT ("json" or "console")
    """
    level = level or settings.log_level
    log_format = log_format or settings.log_format

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *PRE_CHAIN,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers[:] = [_stdout_handler(log_format)]
    root.setLevel(level)

    for name, capped_at in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(capped_at)
    # DB_ECHO turns on statement logging through the stdlib logger
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db_echo else logging.WARNING
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Module logger; call as `logger = get_logger(__name__)`."""
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """
    Attach key/values to every log event of the current request or task.

    Usage:
        bind_context(user_id=str(user_id))
        logger.info("Article updated")  # carries user_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
