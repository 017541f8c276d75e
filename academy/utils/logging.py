# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging setup.

Modules keep using ``logging.getLogger(__name__)``. Their records are
rendered by structlog's ProcessorFormatter, so uvicorn, SQLAlchemy and our
own loggers share one format: JSON lines outside development, a readable
console layout otherwise. Request-scoped values bound with bind_context()
(the caller's user id, set by the auth middleware) are merged into every
record.
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from academy.core.config.settings import Settings

_QUIET_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "sqlalchemy.engine",
    "apscheduler",
    "asyncio",
)


def _renderer(settings: "Settings") -> Processor:
    if settings.is_development:
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    return structlog.processors.JSONRenderer()


def setup_logging(settings: "Settings") -> None:
    """Route stdlib and structlog output through one formatter.

    Safe to call more than once; the root handler is replaced each time.

    Args:
        settings: Application settings (log_level, environment).
    """
    level = logging.getLevelName(settings.log_level.upper())

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            _renderer(settings),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**values: object) -> None:
    """Attach values to every record logged from the current context."""
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    """Drop all values bound with bind_context()."""
    structlog.contextvars.clear_contextvars()
