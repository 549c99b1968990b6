"""
Error taxonomy for the customer management domain

Every error raised across the domain, repository, cache, authentication and
API-client boundaries derives from CustomerManagementError so callers can tell
domain failures apart from transient infrastructure failures.
"""

from typing import Any, Dict, Optional


class CustomerManagementError(Exception):
    """Base exception for the customer management layer"""

    transient: bool = False

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or "An error occurred. Please try again."
        self.error_code = error_code or "GENERAL_ERROR"
        self.context = context or {}

    @property
    def is_transient(self) -> bool:
        """Whether retrying the same request later may succeed"""
        return self.transient


class ValidationError(CustomerManagementError, ValueError):
    """Input validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            message,  # Validation errors are user-friendly
            "VALIDATION_ERROR",
            {"field": field} if field else None,
        )
        self.field = field


class InvalidStateTransitionError(CustomerManagementError):
    """Operation not allowed from the customer's current status"""

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(
            message,
            message,
            "INVALID_STATE_TRANSITION",
            {"current_status": current_status} if current_status else None,
        )
        self.current_status = current_status


class CustomerNotFoundError(CustomerManagementError):
    """Customer not found"""

    def __init__(self, customer_id: Any):
        super().__init__(
            f"Customer not found: {customer_id}",
            "Customer not found.",
            "CUSTOMER_NOT_FOUND",
            {"customer_id": str(customer_id)},
        )
        self.customer_id = customer_id


class UniqueConstraintViolationError(CustomerManagementError):
    """A unique field (the customer email) is already taken"""

    def __init__(self, message: str, field: str = "email", value: Optional[str] = None):
        context: Dict[str, Any] = {"field": field}
        if value is not None:
            context["value"] = value
        super().__init__(
            message,
            "A customer with this email already exists.",
            "UNIQUE_CONSTRAINT_VIOLATION",
            context,
        )
        self.field = field
        self.value = value


class StorageError(CustomerManagementError):
    """Persistence layer failure"""

    transient = True

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(
            message,
            "Sorry, there was a problem with our system. Please try again in a moment.",
            "STORAGE_ERROR",
            {"operation": operation} if operation else None,
        )
        self.operation = operation


class ConcurrencyConflictError(CustomerManagementError):
    """The entity was modified by another unit of work since it was loaded"""

    transient = True

    def __init__(
        self,
        customer_id: Any,
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None,
    ):
        message = f"Customer {customer_id} was modified concurrently"
        if expected_version is not None and actual_version is not None:
            message += f" (expected version {expected_version}, found {actual_version})"
        super().__init__(
            message,
            "This customer was changed by someone else. Reload and try again.",
            "CONCURRENCY_CONFLICT",
            {
                "customer_id": str(customer_id),
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
        self.customer_id = customer_id


class OperationTimeoutError(CustomerManagementError):
    """A remote, cache or storage call did not complete in time"""

    transient = True

    def __init__(self, operation: str, timeout_seconds: Optional[float] = None):
        context: Dict[str, Any] = {"operation": operation}
        if timeout_seconds is not None:
            context["timeout_seconds"] = timeout_seconds
        super().__init__(
            f"Operation timed out: {operation}",
            "The service is taking too long to respond. Please try again.",
            "TIMEOUT",
            context,
        )
        self.operation = operation


class AuthenticationError(CustomerManagementError):
    """Bad credentials, missing session or failed token refresh"""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            message,
            "Your session has expired. Please sign in again.",
            "AUTHENTICATION_ERROR",
        )


class RemoteServiceError(CustomerManagementError):
    """Customer service returned an unexpected failure"""

    def __init__(
        self, message: str, status_code: Optional[int] = None, operation: Optional[str] = None
    ):
        context: Dict[str, Any] = {}
        if status_code is not None:
            context["status_code"] = status_code
        if operation:
            context["operation"] = operation
        super().__init__(
            message,
            "The customer service is unavailable right now. Please try again later.",
            "REMOTE_SERVICE_ERROR",
            context,
        )
        self.status_code = status_code
        self.operation = operation


class CacheError(CustomerManagementError):
    """Cache backend failure; cache managers absorb it as a miss"""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(
            message, error_code="CACHE_ERROR", context={"key": key} if key else None
        )
        self.key = key
