"""Diagnostic logging for the DM Companion.

Engine, module loading and LLM code log through structlog with keyword
context. This log goes to stderr (and optionally a file) and is separate
from the in-game session log that players read on stdout.

Credentials never reach a log line: any event key that names an API key
or auth header is masked before rendering.

Example:
    >>> from dm_companion.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Encounter started", encounter_id="guard-post", enemies=3)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from dm_companion.core.config import Settings


APP_NAME = "dm_companion"
REDACTED = "***"

_SECRET_KEYS = frozenset({"api_key", "authorization", "x-api-key", "x_api_key", "password", "token"})

# HTTP clients and the LLM SDK log every request at INFO
_NOISY_LOGGERS = ("requests", "urllib3", "httpx", "httpcore", "anthropic", "asyncio")

_STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every entry with the application name."""
    event_dict["app"] = APP_NAME
    return event_dict


def redact_secrets(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Mask values whose key names a credential.

    Matches ``api_key``, any ``*_api_key``, auth headers, passwords and
    tokens, case-insensitively.
    """
    for key in event_dict:
        lowered = key.lower()
        if (lowered in _SECRET_KEYS or lowered.endswith("_api_key")) and event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, render JSON lines instead of console output.
        log_file: Optional path that also receives stdlib log records.

    Example:
        >>> configure_logging(level="DEBUG", json_format=False)
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    log_level = getattr(logging, level.upper(), logging.INFO)

    # stdout belongs to the game console
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format=_STDLIB_FORMAT, level=log_level, stream=sys.stderr, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(_STDLIB_FORMAT))
        logging.getLogger().addHandler(file_handler)


def logging_options(settings: Settings) -> dict[str, Any]:
    """Translate application settings into ``configure_logging`` arguments.

    Debug mode forces DEBUG regardless of ``log_level``.
    """
    return {
        "level": "DEBUG" if settings.debug else settings.log_level,
        "json_format": settings.log_json,
        "log_file": settings.log_file,
    }


def configure_logging_from_settings(settings: Settings) -> None:
    configure_logging(**logging_options(settings))


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structlog logger, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables that will be included in all subsequent logs.

    Example:
        >>> bind_context(module_id="goblin-cave", provider="ollama")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind context for the duration of a block, e.g. one DM chat turn."""
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


__all__ = [
    "configure_logging",
    "configure_logging_from_settings",
    "logging_options",
    "redact_secrets",
    "get_logger",
    "bind_context",
    "clear_context",
    "log_context",
]
