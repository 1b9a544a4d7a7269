"""Structured logging for NEARLINK.

Features:
- JSON or text format output
- Request ID propagation
- Key material redaction
- Configurable log level
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog

# Context variable for request ID
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# Name of the root handler installed by configure_logging
HANDLER_NAME = "nearlink"

# Fields that must never reach log output
REDACTED_FIELDS = frozenset(
    {
        "secret_key",
        "private_key",
        "seed",
        "secret",
        "password",
        "signature",
    }
)


def _add_request_id(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add request ID to log event if available."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def _redact_sensitive(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Redact key material from log events."""
    for key in event_dict:
        if key.lower() in REDACTED_FIELDS:
            event_dict[key] = "[REDACTED]"
    return event_dict


def _shared_processors() -> list[structlog.typing.Processor]:
    """Processors applied to both structlog and stdlib log records."""
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_request_id,
    ]


def configure_logging(
    level: str = "INFO",
    log_format: str = "json",
) -> None:
    """Configure structured logging for the application.

    Records from ``logging.getLogger(...)`` callers go through the same
    pipeline as structlog loggers: their ``extra`` fields are merged into
    the event, key material is redacted and the line is rendered as JSON
    or text on stderr.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR).
    log_format : str
        Output format (json or text).
    """
    try:
        log_level = getattr(logging, level.upper())
    except AttributeError:
        raise ValueError(
            f"Invalid log level: {level!r}. "
            "Valid levels are: DEBUG, INFO, WARNING, ERROR, CRITICAL."
        ) from None

    renderer: structlog.typing.Processor
    if log_format.lower() == "json":
        render_chain = [structlog.processors.format_exc_info]
        renderer = structlog.processors.JSONRenderer()
    else:
        render_chain = []
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            *_shared_processors(),
            structlog.stdlib.ExtraAdder(),
            _redact_sensitive,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *render_chain,
            renderer,
        ],
    )

    # CLI output goes to stdout, so logs go to stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            _redact_sensitive,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Parameters
    ----------
    name : str | None
        Logger name. If None, uses the calling module's name.

    Returns
    -------
    structlog.stdlib.BoundLogger
        Configured logger instance.
    """
    return structlog.get_logger(name)


def set_request_id(request_id: str) -> None:
    """Set the request ID for the current context.

    Parameters
    ----------
    request_id : str
        The request ID to set.
    """
    request_id_var.set(request_id)


def clear_request_id() -> None:
    """Clear the request ID for the current context."""
    request_id_var.set(None)
