"""Seed Catalog — static baseline roles, permissions, and role grants.

Invariants:
    - Every permission name equals permission_name(resource, action)
    - Permission names are unique; role names are unique
    - ROLE_GRANTS only references names defined in PERMISSION_DEFINITIONS
    - EXPECTED_SYSTEM_PERMISSIONS == len(PERMISSION_DEFINITIONS)

Design Decisions:
    - Plain frozen dataclasses and tuples: the catalog is data, not behavior
    - system has no create/delete: configuration rows are edited, never added or removed
    - admin grants are derived from the catalog so new permissions reach admin automatically
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from rolegate.core.domain_types import (
    Action, PermissionName, Resource, RoleName, permission_name,
)


@dataclass(frozen=True)
class PermissionDefinition:
    resource: Resource
    action: Action
    display_name: str
    group: str

    @property
    def name(self) -> PermissionName:
        return permission_name(self.resource, self.action)

    @property
    def description(self) -> str:
        return f"{self.group} - {self.display_name}"


@dataclass(frozen=True)
class RoleDefinition:
    name: RoleName
    display_name: str
    description: str
    sort_order: int


_CRUD_MANAGE = (Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE, Action.MANAGE)

# (resource, group label, noun used in display names, actions)
_RESOURCE_TABLE: tuple[tuple[Resource, str, str, tuple[Action, ...]], ...] = (
    (Resource.USER, "User Management", "Users", _CRUD_MANAGE),
    (Resource.ROLE, "Role Management", "Roles", _CRUD_MANAGE),
    (Resource.PERMISSION, "Permission Management", "Permissions", _CRUD_MANAGE),
    (Resource.QUESTION, "Question Bank", "Questions", _CRUD_MANAGE),
    (Resource.LECTURE, "Lecture Management", "Lectures", _CRUD_MANAGE),
    (Resource.ORDER, "Order Management", "Orders", _CRUD_MANAGE),
    (Resource.AFFILIATE, "Affiliate Management", "Affiliates", _CRUD_MANAGE),
    (Resource.SYSTEM, "System Management", "System Settings",
     (Action.READ, Action.UPDATE, Action.MANAGE)),
    (Resource.CONTENT, "Content Management", "Content", _CRUD_MANAGE),
)

_ACTION_VERBS = {
    Action.CREATE: "Create",
    Action.READ: "View",
    Action.UPDATE: "Update",
    Action.DELETE: "Delete",
    Action.MANAGE: "Manage",
}

PERMISSION_DEFINITIONS: tuple[PermissionDefinition, ...] = tuple(
    PermissionDefinition(
        resource=resource,
        action=action,
        display_name=f"{_ACTION_VERBS[action]} {noun}",
        group=group,
    )
    for resource, group, noun, actions in _RESOURCE_TABLE
    for action in actions
)

EXPECTED_SYSTEM_PERMISSIONS = len(PERMISSION_DEFINITIONS)  # 43

# pg_advisory_xact_lock key shared by every replica ("ROLE")
DEFAULT_SEED_LOCK_KEY = 0x524F4C45

ROLE_DEFINITIONS: tuple[RoleDefinition, ...] = (
    RoleDefinition(
        name=RoleName("admin"),
        display_name="Administrator",
        description="Administrator role holding every system permission",
        sort_order=100,
    ),
    RoleDefinition(
        name=RoleName("teacher"),
        display_name="Teacher",
        description="Teacher role, manages the question bank and lectures",
        sort_order=50,
    ),
    RoleDefinition(
        name=RoleName("student"),
        display_name="Student",
        description="Student role, read-only access to learning content",
        sort_order=10,
    ),
    RoleDefinition(
        name=RoleName("user"),
        display_name="User",
        description="Default role for registered users",
        sort_order=0,
    ),
)


def _resource_permissions(resource: Resource) -> tuple[PermissionName, ...]:
    return tuple(d.name for d in PERMISSION_DEFINITIONS if d.resource is resource)


_QUESTION_READ = permission_name(Resource.QUESTION, Action.READ)
_LECTURE_READ = permission_name(Resource.LECTURE, Action.READ)
_CONTENT_READ = permission_name(Resource.CONTENT, Action.READ)

ROLE_GRANTS: dict[RoleName, tuple[PermissionName, ...]] = {
    RoleName("admin"): tuple(d.name for d in PERMISSION_DEFINITIONS),
    RoleName("teacher"): (
        *_resource_permissions(Resource.QUESTION),
        *_resource_permissions(Resource.LECTURE),
        _CONTENT_READ,
    ),
    RoleName("student"): (_QUESTION_READ, _LECTURE_READ, _CONTENT_READ),
    RoleName("user"): (_QUESTION_READ, _LECTURE_READ),
}


def grant_pairs(
    grants: Mapping[RoleName, Iterable[PermissionName]],
    role_ids: Mapping[str, int],
    permission_ids: Mapping[str, int],
) -> list[tuple[int, int]]:
    """(role_id, permission_id) pairs for every grant whose role and permission exist.

    Unknown role or permission names are skipped, never raised.
    """
    pairs: list[tuple[int, int]] = []
    for role_name, permission_names in grants.items():
        role_id = role_ids.get(role_name)
        if role_id is None:
            continue
        for name in permission_names:
            permission_id = permission_ids.get(name)
            if permission_id is not None:
                pairs.append((role_id, permission_id))
    return pairs
