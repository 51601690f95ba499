"""Structured logging for TorchTime.

Every module logs through structlog with keyword context:

    >>> from torchtime.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Vote recorded", proposal_id="p1", choice="yes")

Streamlit re-executes the app script on every interaction, so
configure_logging is called once per rerun and only reconfigures when the
requested output actually changes. The logged-in user is bound per rerun
with bind_context.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger


REDACTED = "***"

SENSITIVE_KEYS = frozenset({"password", "new_password"})

NOISY_LOGGERS = ("urllib3", "requests", "watchdog", "streamlit")

_active_config: tuple[int, bool] | None = None


def redact_secrets(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Mask password fields so credentials never reach the log output."""
    for key in SENSITIVE_KEYS & event_dict.keys():
        event_dict[key] = REDACTED
    return event_dict


def tag_app(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    event_dict.setdefault("app", "torchtime")
    return event_dict


def _processors(json_format: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        tag_app,
        redact_secrets,
    ]
    if json_format:
        return [
            *processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        *processors,
        structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback),
    ]


def configure_logging(*, level: str = "INFO", json_format: bool = False) -> bool:
    """Route structlog and third-party logging to stderr.

    Args:
        level: Logging level name; unknown names fall back to INFO.
        json_format: Render JSON lines instead of the console format.

    Returns:
        True if logging was (re)configured, False if it already matched.
    """
    global _active_config

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    if _active_config == (numeric_level, json_format):
        return False

    structlog.configure(
        processors=_processors(json_format),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=numeric_level,
        stream=sys.stderr,
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    _active_config = (numeric_level, json_format)
    return True


def reset_logging() -> None:
    """Forget the active configuration and restore structlog defaults."""
    global _active_config
    _active_config = None
    structlog.reset_defaults()


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach key-value pairs to every later log entry of this rerun.

    Example:
        >>> bind_context(user_id="abc123")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "configure_logging",
    "reset_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "redact_secrets",
]
