"""
Logging Configuration

Provides structured logging with console, rotating file and JSON handlers,
operation timing, and masking of credentials and tokens in every record.
"""

import logging
import logging.handlers
import os
import re
import sys
import threading
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional

import structlog
from pythonjsonlogger import jsonlogger

from ..configuration.config import get_config
from ..utilities.constants import LoggingSettings

SENSITIVE_KEYS = frozenset(
    {"password", "access_token", "refresh_token", "accesstoken", "refreshtoken", "authorization"}
)

_BEARER_PATTERN = re.compile(r"(?i)(bearer\s+)[A-Za-z0-9\-._~+/]+=*")
_KEY_VALUE_PATTERN = re.compile(
    r"(?i)([\"']?(?:access_token|refresh_token|accessToken|refreshToken|password)[\"']?"
    r"\s*[:=]\s*[\"']?)([^\"'\s,;&}]+)"
)


def redact(text: str) -> str:
    """Mask bearer tokens and credential values inside free text"""
    text = _BEARER_PATTERN.sub(r"\1" + LoggingSettings.REDACTED, text)
    return _KEY_VALUE_PATTERN.sub(r"\1" + LoggingSettings.REDACTED, text)


def redact_sensitive_data(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking sensitive keys and values"""
    for key, value in list(event_dict.items()):
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = LoggingSettings.REDACTED
        elif isinstance(value, str):
            event_dict[key] = redact(value)
    return event_dict


class SensitiveDataFilter(logging.Filter):
    """Masks tokens and passwords in log messages and extra fields"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()

        for key, value in list(record.__dict__.items()):
            if key.lower() in SENSITIVE_KEYS:
                setattr(record, key, LoggingSettings.REDACTED)
            elif key not in ("msg", "message") and isinstance(value, str):
                setattr(record, key, redact(value))
        return True


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for console output"""

    colors = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so file handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        log_color = self.colors.get(record.levelname, self.colors['RESET'])
        record.levelname = f"{log_color}{record.levelname}{self.colors['RESET']}"
        return super().format(record)


class CustomerJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with process, thread and operation timing fields"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["thread_name"] = threading.current_thread().name
        log_record["process_id"] = os.getpid()

        if hasattr(record, "operation_time"):
            log_record["operation_time_ms"] = record.operation_time


@dataclass
class LoggingConfigOptions:
    """Dataclass for logging configuration options"""
    log_level: str = "INFO"
    log_dir: str = "logs"
    enable_console: bool = True
    enable_file: bool = True
    enable_json: bool = True
    max_file_size: int = LoggingSettings.MAX_LOG_FILE_SIZE
    backup_count: int = LoggingSettings.MAIN_LOG_BACKUP_COUNT


class LoggingConfig:
    """Logging configuration for the service"""

    def __init__(self, options: LoggingConfigOptions):
        self.options = options
        self._configure_structlog()

    def __repr__(self):
        return f"LoggingConfig(options={self.options})"

    def _configure_structlog(self):
        """Configure structlog for structured logging"""
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                redact_sensitive_data,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer()
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def setup_logging(self):
        """Install handlers on the root logger"""
        level = getattr(logging, self.options.log_level.upper())
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        sensitive_filter = SensitiveDataFilter()
        plain_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        if self.options.enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(ColoredFormatter(
                fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            root_logger.addHandler(console_handler)

        if self.options.enable_file or self.options.enable_json:
            Path(self.options.log_dir).mkdir(parents=True, exist_ok=True)

        if self.options.enable_file:
            app_handler = logging.handlers.RotatingFileHandler(
                Path(self.options.log_dir) / 'customer_management.log',
                maxBytes=self.options.max_file_size,
                backupCount=self.options.backup_count,
                encoding="utf-8",
            )
            app_handler.setLevel(logging.INFO)
            app_handler.setFormatter(plain_formatter)
            root_logger.addHandler(app_handler)

            error_handler = logging.handlers.RotatingFileHandler(
                Path(self.options.log_dir) / 'errors.log',
                maxBytes=self.options.max_file_size,
                backupCount=LoggingSettings.ERROR_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(plain_formatter)
            root_logger.addHandler(error_handler)

        if self.options.enable_json:
            json_handler = logging.handlers.RotatingFileHandler(
                Path(self.options.log_dir) / 'customer_management.json.log',
                maxBytes=LoggingSettings.JSON_LOG_FILE_SIZE,
                backupCount=LoggingSettings.JSON_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
            json_handler.setLevel(logging.INFO)
            json_handler.setFormatter(CustomerJsonFormatter())
            root_logger.addHandler(json_handler)

        # Filters on handlers also cover records propagated from child loggers
        for handler in root_logger.handlers:
            handler.addFilter(sensitive_filter)

        self._configure_external_loggers()

        logger = logging.getLogger(__name__)
        logger.info(
            "Logging configured - Level: %s, Console: %s, File: %s, JSON: %s",
            self.options.log_level,
            self.options.enable_console,
            self.options.enable_file,
            self.options.enable_json
        )

    def _configure_external_loggers(self):
        """Quiet down chatty third-party loggers"""
        logging.getLogger('sqlalchemy').setLevel(logging.WARNING)
        logging.getLogger('httpx').setLevel(logging.WARNING)
        logging.getLogger('httpcore').setLevel(logging.WARNING)


class PerformanceLogger:
    """Context manager timing an operation and logging its outcome"""

    def __init__(
        self,
        operation_name: str,
        logger: Optional[logging.Logger] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.operation_name = operation_name
        self.logger = logger or logging.getLogger("performance")
        self.details = details or {}
        self.start_time = 0.0
        self.duration_ms = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(
            "Starting operation: %s",
            self.operation_name,
            extra={"operation": self.operation_name, **self.details},
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000
        extra = {
            "operation": self.operation_name,
            "operation_time": self.duration_ms,
            "success": exc_type is None,
            **self.details,
        }

        if exc_type is not None:
            extra["error_type"] = exc_type.__name__
            self.logger.warning(
                "Failed operation: %s (%.1fms)", self.operation_name, self.duration_ms,
                extra=extra,
            )
        elif self.duration_ms > LoggingSettings.SLOW_OPERATION_THRESHOLD_MS:
            self.logger.warning(
                "Slow operation: %s took %.1fms", self.operation_name, self.duration_ms,
                extra=extra,
            )
        else:
            self.logger.debug(
                "Completed operation: %s (%.1fms)", self.operation_name, self.duration_ms,
                extra=extra,
            )
        return False


def setup_logging(options: Optional[LoggingConfigOptions] = None) -> LoggingConfig:
    """Setup logging, reading defaults from the application settings"""
    if options is None:
        config = get_config()
        options = LoggingConfigOptions(
            log_level=config.log_level,
            log_dir=config.log_dir,
            enable_console=not config.is_production,
        )
    logging_config = LoggingConfig(options)
    logging_config.setup_logging()
    return logging_config


def get_structured_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)
