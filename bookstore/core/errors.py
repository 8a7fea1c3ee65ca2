"""Error Hierarchy - typed, categorized exceptions for all Bookstore failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Request-level errors (400-level) resolve to a response on the same request
    - Only BootstrapError is allowed to terminate the process
    - to_response() never includes internal details (stack traces, driver messages)

Design Decisions:
    - Single hierarchy with BookstoreError base: one global handler and one
      pipeline failure path produce the same envelope (ADR: uniform error shape)
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    CORS = "cors"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    BOOTSTRAP = "bootstrap"
    LIFECYCLE = "lifecycle"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Observability context attached to an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    path: str | None = None
    session_id: str | None = None
    debug_info: dict[str, Any] | None = None


class BookstoreError(Exception):
    """Base exception for all Bookstore errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Request Errors (400-level) ─────────────────────────────────

class MalformedBodyError(BookstoreError):
    """Request body could not be decoded."""
    def __init__(self, content_type: str, context: ErrorContext | None = None):
        super().__init__(
            f"Request body is not valid {content_type}",
            "MALFORMED_BODY", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class PayloadTooLargeError(BookstoreError):
    """Request body exceeds the configured limit."""
    def __init__(self, limit_bytes: int, context: ErrorContext | None = None):
        super().__init__(
            f"Request body exceeds {limit_bytes} bytes",
            "PAYLOAD_TOO_LARGE", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 413,
        )
        self.limit_bytes = limit_bytes


class CorsRejectedError(BookstoreError):
    """Request origin is not the configured frontend origin."""
    def __init__(self, origin: str, context: ErrorContext | None = None):
        super().__init__(
            f"Origin '{origin}' is not allowed",
            "CORS_REJECTED", ErrorCategory.CORS,
            ErrorSeverity.WARNING, context, 403,
        )
        self.origin = origin


class UnauthorizedError(BookstoreError):
    """No logged-in principal on the session."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authentication required",
            "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(BookstoreError):
    """Principal lacks the required role."""
    def __init__(self, required_role: str, context: ErrorContext | None = None):
        super().__init__(
            f"Role '{required_role}' required",
            "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.required_role = required_role


class InvalidCredentialsError(BookstoreError):
    """Login attempted with unknown email or wrong password."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invalid email or password",
            "INVALID_CREDENTIALS", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ResourceNotFoundError(BookstoreError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ConflictError(BookstoreError):
    """Write collides with existing state (e.g. duplicate email)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(BookstoreError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class BootstrapError(BookstoreError):
    """A persistence bootstrap step failed. Fatal."""
    def __init__(self, step: str, cause: str, context: ErrorContext | None = None):
        super().__init__(
            f"Bootstrap step '{step}' failed: {cause}",
            "BOOTSTRAP_FAILED", ErrorCategory.BOOTSTRAP,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.step = step


class LifecycleError(BookstoreError):
    """Illegal server lifecycle transition."""
    def __init__(self, current: str, target: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot transition from {current} to {target}",
            "ILLEGAL_TRANSITION", ErrorCategory.LIFECYCLE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.current = current
        self.target = target


class InternalError(BookstoreError):
    """Unexpected failure. Message is generic by construction."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "An unexpected error occurred",
            "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
