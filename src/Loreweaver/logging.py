# logging.py

import logging
import os
from logging.handlers import RotatingFileHandler

import structlog
from structlog.contextvars import merge_contextvars

from Loreweaver.config import Settings


def _handler_level(name: str | None, default: int) -> int | None:
    """Map a per-handler level string to a logging level; ``NONE`` disables."""
    if name is None:
        return default
    if name.upper() == "NONE":
        return None
    return getattr(logging, name.upper(), default)


def setup_logging(settings: Settings | None = None) -> None:
    """Initialize structlog + stdlib logging.

    If settings provided, enable rotating file logs per [logging] config.
    Defaults: INFO level, console on, file to logs/loreweaver.jsonl.
    """
    level_name = (settings.logging_level if settings else "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.captureWarnings(True)

    # ProcessorFormatter renders BOTH structlog and stdlib/third-party logs as JSON
    processor_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=[
            structlog.processors.add_log_level,
            merge_contextvars,
        ],
    )

    root_handlers: list[logging.Handler] = []
    enabled = settings.logging_enabled if settings is not None else True

    console_lvl = _handler_level(settings.logging_console if settings else None, level)
    if enabled and console_lvl is not None:
        ch = logging.StreamHandler()
        ch.setLevel(console_lvl)
        ch.setFormatter(processor_formatter)
        root_handlers.append(ch)

    file_lvl = _handler_level(settings.logging_file if settings else None, level)
    if enabled and file_lvl is not None:
        path = settings.logging_file_path if settings is not None else "logs/loreweaver.jsonl"
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        fh = RotatingFileHandler(
            path,
            maxBytes=(settings.logging_max_bytes if settings else 5_000_000),
            backupCount=(settings.logging_backup_count if settings else 5),
        )
        fh.setLevel(file_lvl)
        fh.setFormatter(processor_formatter)
        root_handlers.append(fh)

    if not root_handlers:
        root_handlers.append(logging.NullHandler())

    # force=True replaces any prior configuration
    logging.basicConfig(level=level, handlers=root_handlers, force=True)

    # Let SQLAlchemy/Alembic loggers bubble up into our root handlers
    for name in ("sqlalchemy", "alembic", "asyncio"):
        lg = logging.getLogger(name)
        lg.handlers = []
        lg.propagate = True

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def redact_settings(settings: Settings) -> dict:
    """Return a dict of settings safe for logging.

    Credentials embedded in the database URL are replaced with "[REDACTED]".
    """
    from sqlalchemy.engine import make_url

    data = settings.model_dump()
    url = make_url(settings.database_url)
    if url.password:
        # render_as_string would percent-escape a placeholder password
        masked = url.render_as_string(hide_password=True)
        data["database_url"] = masked.replace(":***@", ":[REDACTED]@", 1)
    return data
