"""Error Hierarchy — typed, categorized exceptions for all portal failure modes.

Invariants:
    - Every error has a code (str), kind (ErrorKind), severity (ErrorSeverity)
    - ErrorKind is the discriminant exposed to callers next to the human-readable message
    - Domain errors (400-level) abort before mutation; infrastructure errors are 500-level
    - to_response() produces the REST envelope; no internal details leaked in messages

Design Decisions:
    - Single hierarchy with PortalError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(str, Enum):
    """How loudly a failure is logged; also echoed to clients."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorKind(str, Enum):
    """Discriminated failure kinds surfaced in every operation result."""
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """When the error happened and which record it concerns."""
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resource_id: str | None = None


class PortalError(Exception):
    """Base exception for all portal errors."""

    def __init__(
        self,
        message: str,
        code: str,
        kind: ErrorKind,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.kind = kind
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """REST error envelope; resource_id only when the error names a record."""
        body = {
            "code": self.code,
            "message": self.message,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "timestamp": self.context.occurred_at.isoformat(),
        }
        if self.context.resource_id is not None:
            body["resource_id"] = self.context.resource_id
        return {"error": body}


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationFailedError(PortalError):
    """Input failed a domain constraint (length, format, confirmation)."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorKind.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class ResourceNotFoundError(PortalError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_id = resource_id
        super().__init__(
            f"{resource_type} with ID {resource_id} not found.",
            "RESOURCE_NOT_FOUND", ErrorKind.NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.resource_type = resource_type


class InvalidStateError(PortalError):
    """Record is not in the state the transition requires."""
    def __init__(
        self, message: str, current_status: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "INVALID_STATE", ErrorKind.INVALID_STATE,
            ErrorSeverity.WARNING, context, 409,
        )
        self.current_status = current_status


class PermissionDeniedError(PortalError):
    """Authenticated actor may not perform this operation."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "PERMISSION_DENIED", ErrorKind.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class AuthenticationError(PortalError):
    """No valid session, or credentials rejected."""
    def __init__(self, message: str = "Authentication required.", context: ErrorContext | None = None):
        super().__init__(
            message, "NOT_AUTHENTICATED", ErrorKind.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidTokenError(PortalError):
    """Signed token is malformed, expired, already used, or issued for another purpose."""
    def __init__(self, message: str, reason: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_TOKEN", ErrorKind.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )
        self.reason = reason


# ─── Infrastructure Errors (500-level) ──────────────────────────

class IdentityProviderError(PortalError):
    """Identity provider rejected or failed an operation.

    provider_code carries the provider's own code (e.g. "email-already-in-use")
    so callers can pick a friendlier message without string matching.
    """
    def __init__(
        self, message: str, provider_code: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "IDENTITY_PROVIDER_ERROR", ErrorKind.UPSTREAM,
            ErrorSeverity.ERROR, context, 502,
        )
        self.provider_code = provider_code


class DatabaseError(PortalError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorKind.INTERNAL,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class InternalError(PortalError):
    """Unexpected failure — message is safe for display."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INTERNAL_ERROR", ErrorKind.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


# ─── Helpers ────────────────────────────────────────────────────

def error_from_check(check: dict) -> PortalError:
    """Turn an error dict from core/enforce_* into the matching exception."""
    kind = ErrorKind(check["kind"])
    message = check["message"]
    if kind == ErrorKind.INVALID_STATE:
        error: PortalError = InvalidStateError(message, check.get("current_status"))
    elif kind == ErrorKind.AUTHORIZATION:
        error = PermissionDeniedError(message)
    elif kind == ErrorKind.VALIDATION:
        error = ValidationFailedError(message, check.get("field"))
    elif kind == ErrorKind.NOT_FOUND:
        error = PortalError(message, "", kind, ErrorSeverity.WARNING, http_status=404)
    else:
        error = InternalError(message)
    error.code = check["error_code"]
    return error
