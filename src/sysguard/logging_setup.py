"""
Structured logging for sysguard.

structlog is routed through stdlib logging. The terminal belongs to the
Textual app while it runs, so records only go to a file when one is
configured; otherwise they are dropped by a ``NullHandler``.

Usage:
    setup_logging("DEBUG", "/tmp/sysguard.log")   # once at startup
    log = get_logger(__name__)
    log.info("collector.scan", count=312)
"""

import logging
from pathlib import Path
from typing import Any

import structlog


def setup_logging(level: str = "INFO", log_file: str | Path | None = None) -> None:
    """
    Configure structlog and stdlib logging. Call once at application startup.

    Args:
        level:    Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path of a file to append JSON lines to, or None to discard.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    handler: logging.Handler
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    else:
        handler = logging.NullHandler()
    handler.setLevel(numeric_level)

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=[handler],
        force=True,
    )

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(),
            ],
            foreign_pre_chain=shared_processors,
        )
    )


def get_logger(name: str = "sysguard", **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """Get a logger, optionally bound to some permanent context values."""
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger
