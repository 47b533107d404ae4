"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - PermissionName is always "<resource>:<action>" when it comes from the catalog
    - PermissionSet is immutable (frozenset) — resolved once, never mutated by callers
    - All valid resources and actions encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: stored as plain strings and serialize to JSON without custom encoders
    - Principal is a frozen dataclass passed explicitly into the engine, never read
      from ambient request state inside core/
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, NewType


# ─── Identity Types ──────────────────────────────────────────────

RoleName = NewType("RoleName", str)
PermissionName = NewType("PermissionName", str)
SubjectId = NewType("SubjectId", int)

PermissionSet = frozenset[PermissionName]

PERMISSION_SEPARATOR = ":"


# ─── Enums ───────────────────────────────────────────────────────

class Resource(str, Enum):
    """Protected resource families — maps to permissions.resource column."""
    USER = "user"
    ROLE = "role"
    PERMISSION = "permission"
    QUESTION = "question"
    LECTURE = "lecture"
    ORDER = "order"
    AFFILIATE = "affiliate"
    SYSTEM = "system"
    CONTENT = "content"


class Action(str, Enum):
    """Permission actions. MANAGE is the per-resource superset."""
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


class RequirementMode(str, Enum):
    """Which list of a route requirement is evaluated."""
    NONE = "none"
    ANY_OF = "any_of"
    ALL_OF = "all_of"


class DenyReason(str, Enum):
    """Deny taxonomy — every value renders as HTTP 403."""
    AUTHENTICATION_MISSING = "AUTHENTICATION_MISSING"
    ROLE_MISSING = "ROLE_MISSING"
    ROLE_DISABLED = "ROLE_DISABLED"
    PERMISSION_DENIED_ALL = "PERMISSION_DENIED_ALL"
    PERMISSION_DENIED_ANY = "PERMISSION_DENIED_ANY"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Principal:
    """Authenticated actor placed on the request by the auth collaborator."""
    subject_id: SubjectId
    role: RoleName | None = None

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "Principal":
        """Build from a verified token payload ({"sub": ..., "role": ...}).

        Raises ValueError/TypeError when sub is not an integer id.
        """
        role = claims.get("role")
        return cls(
            subject_id=SubjectId(int(claims["sub"])),
            role=RoleName(role) if role else None,
        )


def permission_name(resource: Resource | str, action: Action | str) -> PermissionName:
    """Join a resource and action into the canonical permission name."""
    resource = resource.value if isinstance(resource, Resource) else resource
    action = action.value if isinstance(action, Action) else action
    return PermissionName(f"{resource}{PERMISSION_SEPARATOR}{action}")


def split_permission_name(name: str) -> tuple[str, str] | None:
    """Split "<resource>:<action>" into its parts. None if not exactly two parts."""
    parts = name.split(PERMISSION_SEPARATOR)
    if len(parts) != 2:
        return None
    return parts[0], parts[1]
