# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Logging configuration for ClassLink.

Modules log through ``logging.getLogger(__name__)``. ``setup_logging``
installs one root handler whose ``structlog.stdlib.ProcessorFormatter``
renders both stdlib records and structlog events, so values bound with
``bind_context`` (for example the request id set by the request context
middleware) appear on every line, including service and store logs.

Example:
    >>> from classlink.utils.logging import setup_logging, bind_context
    >>> from classlink.core.config import get_settings
    >>> setup_logging(get_settings())
    >>> bind_context(request_id="req-1")
    >>> logging.getLogger("classlink.domains.teacher_student.service").info("Teacher bound")
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from classlink.core.config.settings import Settings

HANDLER_NAME = "classlink"

_NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "sqlalchemy", "asyncio")


def _renderer(settings: "Settings") -> list[Processor]:
    if settings.is_development or settings.debug:
        return [structlog.dev.ConsoleRenderer(colors=True)]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def setup_logging(settings: "Settings") -> None:
    """Route stdlib and structlog output through one structlog formatter.

    Safe to call more than once; the previously installed handler is
    replaced.

    Args:
        settings: Application settings providing log_level and debug.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Applied to records from both sources before rendering.
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[*shared, structlog.stdlib.ExtraAdder()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_renderer(settings),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("classlink").setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger backed by the stdlib logger ``name``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Bind values to every log line emitted in the current context.

    Example:
        >>> bind_context(request_id="abc-123", student_id="s-1")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear values bound with bind_context."""
    structlog.contextvars.clear_contextvars()
