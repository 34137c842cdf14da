"""structlog setup.

Development gets a coloured console renderer; everywhere else each entry is
one JSON object on stdout with ``message`` in place of structlog's ``event``.
Entries carry the correlation ID bound by the request middleware, or a
throwaway one when logged outside a request (CLI, startup).
"""

import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from quillify.core.config import Settings, get_settings

_DEFAULT_LOGGER = "quillify"
_STDLIB_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def ensure_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("correlation_id", f"cid_{uuid.uuid4().hex[:12]}")
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    # PrintLogger has no name attribute
    event_dict["logger"] = getattr(logger, "name", _DEFAULT_LOGGER)
    return event_dict


def event_to_message(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _renderers(console: bool) -> list[Processor]:
    if console:
        return [
            structlog.dev.ConsoleRenderer(
                colors=True, exception_formatter=structlog.dev.plain_traceback
            )
        ]
    return [event_to_message, structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and bring uvicorn's stdlib loggers to the same level.

    Args:
        settings: Settings to read the level and format from. Defaults to
            :func:`get_settings`.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)
    console = settings.is_development or settings.log_format == "console"

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        ensure_correlation_id,
        *_renderers(console),
    ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        # Cached loggers would ignore a later reconfiguration while developing.
        cache_logger_on_first_use=not console,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _STDLIB_LOGGERS:
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, named ``quillify`` unless told otherwise."""
    return structlog.get_logger(name or _DEFAULT_LOGGER)


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    """Drop everything bound for the current request."""
    structlog.contextvars.clear_contextvars()


class LoggingContext:
    """Bind key-value pairs to every entry logged inside the ``with`` block.

    Example:
        with LoggingContext(user_id=user.id):
            logger.info("Sending verification email")
    """

    def __init__(self, **context: Any) -> None:
        self.context = context

    def __enter__(self) -> "LoggingContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context)
