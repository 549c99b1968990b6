"""
Application constants for the customer management service

Centralizes magic numbers and hard-coded strings used across the
infrastructure layer.
"""

from typing import Final


# Remote API settings
class ApiSettings:
    """Timeouts and token handling for the customer service"""

    DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
    TOKEN_REFRESH_SKEW_SECONDS: Final[int] = 30
    DEFAULT_TOKEN_LIFETIME_SECONDS: Final[int] = 3600  # 1 hour
    LOGIN_PATH: Final[str] = "auth/login"
    REFRESH_PATH: Final[str] = "auth/refresh"


# Database configuration constants
class DatabaseSettings:
    """Database connection and pool configuration"""

    DEFAULT_POOL_SIZE: Final[int] = 10
    MAX_POOL_OVERFLOW: Final[int] = 20
    POOL_RECYCLE_SECONDS: Final[int] = 3600  # 1 hour

    # Production settings
    PRODUCTION_POOL_SIZE: Final[int] = 20
    PRODUCTION_MAX_OVERFLOW: Final[int] = 30

    TOP_LOCATIONS_LIMIT: Final[int] = 10


# Logging configuration constants
class LoggingSettings:
    """Logging file sizes and rotation settings"""

    MAX_LOG_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10MB
    JSON_LOG_FILE_SIZE: Final[int] = 5 * 1024 * 1024  # 5MB

    # Backup counts
    MAIN_LOG_BACKUP_COUNT: Final[int] = 10
    ERROR_LOG_BACKUP_COUNT: Final[int] = 10
    JSON_LOG_BACKUP_COUNT: Final[int] = 5

    SLOW_OPERATION_THRESHOLD_MS: Final[int] = 1000
    REDACTED: Final[str] = "***"


# Cache configuration constants
class CacheSettings:
    """Cache TTL and timeout settings"""

    DEFAULT_TTL_SECONDS: Final[int] = 300  # 5 minutes
    CUSTOMER_TTL_SECONDS: Final[int] = 600  # 10 minutes
    LISTING_TTL_SECONDS: Final[int] = 300  # 5 minutes
    OPERATION_TIMEOUT_SECONDS: Final[float] = 2.0
    SCAN_BATCH_SIZE: Final[int] = 500
    MAX_KEY_LENGTH: Final[int] = 200


# Cache key layout
class CacheKeys:
    """Cache key prefixes and invalidation patterns"""

    BY_ID: Final[str] = "customers:id:{customer_id}"
    BY_EMAIL: Final[str] = "customers:email:{email}"
    QUERY: Final[str] = "customers:query:{kind}:{params}"

    ALL_EMAILS_PATTERN: Final[str] = "customers:email:*"
    ALL_QUERIES_PATTERN: Final[str] = "customers:query:*"
