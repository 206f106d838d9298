"""Error Hierarchy: typed, categorized exceptions for all Guildhall failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Codes are stable: clients branch on them, messages are for humans
    - to_response() produces the REST envelope; extensions produces the GraphQL one
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with GuildhallError base: REST handlers and the GraphQL
      schema both recognise domain errors by one isinstance check
    - extensions is a property: graphql-core copies an original error's
      `extensions` dict onto the GraphQLError it builds
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


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
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    STORAGE = "storage"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logs; never rendered verbatim to clients."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    profile_id: int | None = None
    server_id: int | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class GuildhallError(Exception):
    """Base exception for all Guildhall errors."""

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

    @property
    def extensions(self) -> dict:
        """GraphQL error extensions."""
        return {
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
        }

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class UnauthenticatedError(GuildhallError):
    """Missing, malformed or rejected bearer token."""
    def __init__(self, message: str = "Not authorized", context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ResourceNotFoundError(GuildhallError):
    """Requested resource does not exist or is not visible to the caller."""
    def __init__(
        self, resource_type: str, resource_id: object, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            f"{resource_type.upper()}_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ForbiddenError(GuildhallError):
    """Authenticated, but the caller's role does not allow the operation."""
    def __init__(
        self,
        message: str = "Insufficient role for this operation",
        code: str = "FORBIDDEN",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class LastAdminError(ForbiddenError):
    """Operation would leave a server without an ADMIN."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A server must keep at least one admin", "LAST_ADMIN", context,
        )


class ProtectedChannelError(ForbiddenError):
    """The default channel cannot be deleted."""
    def __init__(self, channel_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Channel '{channel_name}' is protected and cannot be deleted",
            "PROTECTED_CHANNEL", context,
        )


class DuplicateMemberError(GuildhallError):
    """Profile is already a member of the server."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Member already exists", "MEMBER_ALREADY_EXISTS",
            ErrorCategory.CONFLICT, ErrorSeverity.WARNING, context, 409,
        )


class InvalidInputError(GuildhallError):
    """Mutation arguments failed validation."""
    def __init__(
        self,
        message: str,
        field: str | None = None,
        code: str = "VALIDATION_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field

    @property
    def extensions(self) -> dict:
        ext = super().extensions
        if self.field:
            ext["field"] = self.field
        return ext


class ImageRequiredError(InvalidInputError):
    """Server create/update called without an image upload."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__("Image is required", "file", "IMAGE_REQUIRED", context)


class ImageTooLargeError(InvalidInputError):
    """Uploaded image exceeds the configured size limit."""
    def __init__(self, max_bytes: int, context: ErrorContext | None = None):
        super().__init__(
            f"Image exceeds the {max_bytes} byte limit", "file",
            "IMAGE_TOO_LARGE", context,
        )
        self.max_bytes = max_bytes


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(GuildhallError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class StorageError(GuildhallError):
    """Image storage backend failed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Image storage failed: {message}",
            "STORAGE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context, 503,
        )
