"""
Logging Infrastructure

Structured logging, operation timing and sensitive data masking.
"""

from .logger_config import (
    LoggingConfig,
    LoggingConfigOptions,
    PerformanceLogger,
    SensitiveDataFilter,
    get_structured_logger,
    redact,
    setup_logging,
)

__all__ = [
    "LoggingConfig",
    "LoggingConfigOptions",
    "PerformanceLogger",
    "SensitiveDataFilter",
    "get_structured_logger",
    "redact",
    "setup_logging",
]
