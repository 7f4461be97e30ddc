"""
Shared module - Cross-cutting concerns / Shared Layer

This module provides utilities, constants, and enums that are used
across multiple layers of the application.

Its primary responsibilities include:
- Defining cross-layer constants (environment names, log levels,
  numeric guards shared by the prediction algorithms)
- Configuring structured logging

Following Clean Architecture principles:
- Shared module contains only *cross-cutting concerns*
- It must not depend on Infrastructure or Frameworks
"""

from .consts import (
    DEFAULT_CACHE_TTL_SECONDS,
    EPSILON,
    MAX_CONFIDENCE,
    MIN_CONFIDENCE,
    MIN_DAILY_CONSUMPTION,
    EnumEnvironment,
    EnumLogLevel,
)
from .logging import configure_logging, get_logger, update_logging_from_settings

__all__ = [
    "DEFAULT_CACHE_TTL_SECONDS",
    "EPSILON",
    "MAX_CONFIDENCE",
    "MIN_CONFIDENCE",
    "MIN_DAILY_CONSUMPTION",
    "EnumEnvironment",
    "EnumLogLevel",
    "configure_logging",
    "get_logger",
    "update_logging_from_settings",
]
