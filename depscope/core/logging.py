"""Logging setup: structlog processors rendered through stdlib handlers."""

from __future__ import annotations

import logging
import logging.config
import os
from typing import Any

import structlog

# Third-party loggers that are too chatty at INFO.
_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncpg", "httpx", "uvicorn.access")

_RENDERERS = {
    "json": structlog.processors.JSONRenderer,
    "console": structlog.dev.ConsoleRenderer,
}


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _stdlib_config(
    level: str,
    stream: str,
    pre_chain: list[structlog.types.Processor],
    renderer: structlog.types.Processor,
) -> dict[str, Any]:
    loggers: dict[str, dict[str, str]] = {"depscope": {"level": level}}
    loggers.update({name: {"level": "WARNING"} for name in _QUIET_LOGGERS})
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                "foreign_pre_chain": pre_chain,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
            },
        },
        "handlers": {
            "main": {"class": "logging.StreamHandler", "stream": stream, "formatter": "structlog"},
        },
        "root": {"handlers": ["main"], "level": level},
        "loggers": loggers,
    }


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    stream: str = "ext://sys.stdout",
) -> None:
    """Route structlog and stdlib records through one stream handler.

    *level* and *fmt* fall back to ``DEPSCOPE_LOG_LEVEL`` (default INFO)
    and ``DEPSCOPE_LOG_FORMAT`` (``console`` or ``json``, default console).
    The CLI passes ``ext://sys.stderr`` so command output stays clean.
    """
    level = (level or os.environ.get("DEPSCOPE_LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.environ.get("DEPSCOPE_LOG_FORMAT", "console")).lower()
    renderer = _RENDERERS.get(fmt, structlog.dev.ConsoleRenderer)()

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.config.dictConfig(_stdlib_config(level, stream, pre_chain, renderer))
