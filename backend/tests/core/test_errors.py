"""Error Hierarchy — deny taxonomy codes, statuses, messages, and envelopes.

Tests cover:
    - Every authorization error is 403, severity warning, category authorization
    - PermissionDeniedError message lists the given permissions per mode
    - to_response envelope shape, including permissions for denials
    - Infrastructure errors keep 5xx statuses
"""

import pytest

from rolegate.core.errors import (
    AuthenticationMissingError, AuthorizationError, DatabaseError,
    ErrorCategory, ErrorContext, ErrorSeverity, PermissionDeniedError,
    RequirementConflictError, ResourceNotFoundError, RoleDisabledError,
    RoleMissingError,
)


@pytest.mark.parametrize("error,code", [
    (AuthenticationMissingError(), "AUTHENTICATION_MISSING"),
    (RoleMissingError(), "ROLE_MISSING"),
    (RoleDisabledError("legacy"), "ROLE_DISABLED"),
    (PermissionDeniedError("all", ["c:read"]), "PERMISSION_DENIED"),
    (PermissionDeniedError("any", ["a:read"]), "PERMISSION_DENIED"),
])
def test_authorization_errors_are_403_warnings(error, code):
    """Every deny signal is a 403 warning in the authorization category."""
    assert isinstance(error, AuthorizationError)
    assert error.code == code
    assert error.http_status == 403
    assert error.severity is ErrorSeverity.WARNING
    assert error.category is ErrorCategory.AUTHORIZATION


def test_permission_denied_all_message_lists_missing():
    """All-of denial message names the unmet permissions."""
    error = PermissionDeniedError("all", ["question:update"])
    assert error.message == "Requires all of the following permissions: question:update"


def test_permission_denied_any_message_lists_alternatives():
    """Any-of denial message names every acceptable permission."""
    error = PermissionDeniedError("any", ["user:read", "user:manage"])
    assert error.message == (
        "Requires one of the following permissions: user:read, user:manage"
    )


def test_role_disabled_names_role():
    """RoleDisabledError message includes the role name."""
    assert "legacy" in RoleDisabledError("legacy").message


def test_response_envelope_carries_context():
    """to_response renders code, category, severity, timestamp, and context."""
    ctx = ErrorContext(subject_id=7, role_name="student", path="/x")
    body = RoleMissingError(ctx).to_response()["error"]
    assert body["code"] == "ROLE_MISSING"
    assert body["category"] == "authorization"
    assert body["severity"] == "warning"
    assert body["context"] == {"subject_id": 7, "role_name": "student", "path": "/x"}
    assert "timestamp" in body


def test_permission_denied_envelope_lists_permissions():
    """Permission denial envelope adds mode and the permission list."""
    body = PermissionDeniedError("all", ["c:read"]).to_response()["error"]
    assert body["mode"] == "all"
    assert body["permissions"] == ["c:read"]


def test_non_authorization_statuses():
    """Not-found is 404, configuration conflicts 500, database failures 503."""
    assert ResourceNotFoundError("Role", "ghost").http_status == 404
    assert RequirementConflictError("GET /x").http_status == 500
    assert DatabaseError("boom", "commit").http_status == 503
