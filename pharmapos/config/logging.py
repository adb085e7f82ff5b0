"""
Structured logging for PharmaPOS using structlog.

Development gets coloured console lines; staging and production get one JSON
object per event. Money values leave the pricing code as ``Decimal``, so they
are converted to floats before rendering.
"""

import logging
import sys
from decimal import Decimal
from typing import Any

import structlog
from structlog.types import Processor

from pharmapos.config.settings import get_settings

# Third-party loggers that only matter when something is wrong
QUIET_LOGGERS = ("aiosqlite", "uvicorn.access", "multipart")


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp every event with the app name, version and environment."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    return event_dict


def render_money(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Decimal amounts become 2 dp floats so JSONRenderer can emit them."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = float(round(value, 2))
    return event_dict


def _use_json(json_logs: bool | None) -> bool:
    if json_logs is not None:
        return json_logs
    settings = get_settings()
    if settings.log_json is not None:
        return settings.log_json
    return settings.environment != "development"


def configure_logging(json_logs: bool | None = None) -> None:
    """
    Configure structlog over stdlib logging.

    Args:
        json_logs: Force JSON (True) or console (False) output. By default
            LOG_JSON decides, falling back to JSON outside development.
    """
    settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        render_money,
        add_app_context,
    ]

    if _use_json(json_logs):
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_workflow(workflow: str, **context: Any) -> None:
    """
    Attach a commit workflow's identity to every event until the request ends.

    The request middleware clears context variables per request, so nothing
    leaks into the next request.
    """
    structlog.contextvars.bind_contextvars(workflow=workflow, **context)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
