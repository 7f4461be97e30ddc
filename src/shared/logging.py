"""
Logging Configuration - Shared Layer

Structured logging for the prediction engine. The standard library
``logging`` module owns the handlers; structlog owns the event pipeline
and renders either human-friendly console lines or JSON documents.
"""

import logging
import os
import sys
from typing import Any, List, Optional, TextIO

import structlog
from structlog.types import Processor

from src.shared.consts import EnumEnvironment

DEFAULT_SERVICE_NAME = "vaxtrace-insights"


def _resolve(value: Any) -> Any:
    """Unwrap enum members coming from the settings objects."""
    return value.value if hasattr(value, "value") else value


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _build_renderer(environment: str) -> Processor:
    if environment.lower() == EnumEnvironment.PRODUCTION.value:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    level: Optional[str] = None,
    file_path: Optional[str] = None,
    environment: str = EnumEnvironment.DEVELOPMENT.value,
    service_name: str = DEFAULT_SERVICE_NAME,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure stdlib logging and structlog.

    Safe to call more than once: existing root handlers are replaced, so
    the bootstrap configuration can later be refined from settings.

    Args:
        level: Log level name. Falls back to ``LOG_LEVEL`` then ``INFO``.
        file_path: Optional file to mirror console output into.
        environment: Application environment; production renders JSON.
        service_name: Value bound as ``service`` on every event.
        stream: Console stream; stdout when omitted.
    """
    log_level = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    log_file = file_path or os.environ.get("LOG_FILE_PATH")
    numeric_level = getattr(logging, log_level, logging.INFO)

    handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_build_renderer(environment),
        foreign_pre_chain=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        ],
    )
    for handler in handlers:
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)

    get_logger(__name__).debug(
        "logging.configured", level=log_level, file_path=log_file
    )


def update_logging_from_settings(settings: Any, stream: Optional[TextIO] = None) -> None:
    """
    Re-apply the logging configuration from the application settings.

    Args:
        settings: Object exposing ``logging.level``, ``logging.file_path``
            and ``environment`` (the pydantic ``AppSettings``).
        stream: Console stream; stdout when omitted.
    """
    configure_logging(
        level=_resolve(settings.logging.level),
        file_path=settings.logging.file_path,
        environment=_resolve(settings.environment),
        stream=stream,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger configured for the project."""
    return structlog.get_logger(name)
