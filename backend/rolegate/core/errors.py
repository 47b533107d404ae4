"""Error Hierarchy — typed, categorized exceptions for all RoleGate failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Authorization errors are 403, severity WARNING, and never logged as server errors
    - PermissionDeniedError lists exactly the permissions the caller must present:
      the unmet subset for all-of, the full alternative list for any-of
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with RoleGateError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - RoleDisabledError raised from permission resolution itself: disablement is a
      cross-cutting veto, not a kind of missing permission
"""

from collections.abc import Sequence
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
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFIGURATION = "configuration"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    subject_id: int | None = None
    role_name: str | None = None
    path: str | None = None
    debug_info: dict[str, Any] | None = None


class RoleGateError(Exception):
    """Base exception for all RoleGate errors."""

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
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "subject_id": self.context.subject_id,
                    "role_name": self.context.role_name,
                    "path": self.context.path,
                },
            }
        }


# ─── Authorization Errors (403) ─────────────────────────────────

class AuthorizationError(RoleGateError):
    """Request denied by the authorization engine. Never retried."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class AuthenticationMissingError(AuthorizationError):
    """No principal attached to the request."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__("Authentication required", "AUTHENTICATION_MISSING", context)


class RoleMissingError(AuthorizationError):
    """Principal present but carries no role."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__("Principal has no role assigned", "ROLE_MISSING", context)


class RoleDisabledError(AuthorizationError):
    """Role exists but has been administratively disabled."""
    def __init__(self, role_name: str, context: ErrorContext | None = None):
        super().__init__(f"Role '{role_name}' is disabled", "ROLE_DISABLED", context)
        self.role_name = role_name


class PermissionDeniedError(AuthorizationError):
    """Role does not satisfy the route requirement.

    mode="all": permissions is the unmet subset of the all-of list.
    mode="any": permissions is the full any-of list (none was met).
    """
    def __init__(
        self,
        mode: str,
        permissions: Sequence[str],
        context: ErrorContext | None = None,
    ):
        if mode == "all":
            message = f"Requires all of the following permissions: {', '.join(permissions)}"
        else:
            message = f"Requires one of the following permissions: {', '.join(permissions)}"
        super().__init__(message, "PERMISSION_DENIED", context)
        self.mode = mode
        self.permissions = list(permissions)

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["mode"] = self.mode
        response["error"]["permissions"] = self.permissions
        return response


# ─── Request-level Errors ───────────────────────────────────────

class ResourceNotFoundError(RoleGateError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Configuration / Infrastructure Errors (500-level) ──────────

class RequirementConflictError(RoleGateError):
    """Route declares both any-of and all-of lists while dual declarations are rejected."""
    def __init__(self, route: str, context: ErrorContext | None = None):
        super().__init__(
            f"Route '{route}' declares both any-of and all-of permissions",
            "REQUIREMENT_CONFLICT", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.route = route


class DatabaseError(RoleGateError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class SeedError(RoleGateError):
    """RBAC bootstrap failed; all writes of the run were rolled back."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"RBAC seed failed: {message}",
            "SEED_FAILED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
