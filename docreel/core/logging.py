"""Structured logging configuration using structlog.

Every module logs through ``get_logger(__name__)`` with keyword fields.
Production renders JSON lines; development renders a colored console.

Media payloads are base64 text that can run to megabytes, so a redaction
processor replaces any payload-looking value with its length before
rendering. The open script's ID is carried in contextvars so every event
emitted while an editor is open can be correlated.
"""

import logging
import re
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from docreel.core.config import get_config

# Longer values matching this are treated as inline media
_BASE64_RE = re.compile(r"^[A-Za-z0-9+/=\s]+$")
REDACT_MIN_LENGTH = 256


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application name and environment to log events."""
    config = get_config()
    event_dict["app"] = config.app_name
    event_dict["env"] = config.app_env
    return event_dict


def redact_payloads(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace inline media payloads with a size marker.

    Args:
        logger: Logger instance
        method_name: Name of the logging method
        event_dict: Event dictionary

    Returns:
        Event dictionary with ``data:`` URLs and long base64 values redacted
    """
    for key, value in event_dict.items():
        if key == "event" or not isinstance(value, str):
            continue
        if value.startswith("data:") or (
            len(value) >= REDACT_MIN_LENGTH and _BASE64_RE.match(value)
        ):
            event_dict[key] = f"<redacted {len(value)} chars>"
    return event_dict


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level override (default: ``Config.log_level``)
        json_logs: Force JSON (True) or console (False) rendering
            (default: JSON in production only)

    Example:
        >>> setup_logging()
        >>> logger = get_logger(__name__)
        >>> logger.info("Assembly started", segment_count=3)
    """
    config = get_config()
    level = level or config.log_level
    if json_logs is None:
        json_logs = config.is_production

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        redact_payloads,
    ]

    if config.is_development and not json_logs:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            )
        )

    if json_logs:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.warning("Segment excluded", segment_id="3f2a91bc", reason="missing_source")
    """
    return structlog.get_logger(name)


def short_id(segment_id: str | None) -> str | None:
    """Truncate an identifier for log output."""
    return segment_id[:8] if segment_id else segment_id


def bind_script(script_id: str | None) -> None:
    """Attach the open script's ID to every subsequent event in this context."""
    structlog.contextvars.bind_contextvars(script_id=short_id(script_id) or "unsaved")


def unbind_script() -> None:
    """Remove the script ID bound by bind_script."""
    structlog.contextvars.unbind_contextvars("script_id")


__all__ = [
    "add_app_context",
    "bind_script",
    "get_logger",
    "redact_payloads",
    "setup_logging",
    "short_id",
    "unbind_script",
]
