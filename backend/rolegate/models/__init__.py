"""ORM Models — SQLAlchemy declarative models for the role/permission graph.

Invariants:
    - All models inherit from Base (db/base.py)
    - roles and permissions are independent aggregates joined by role_permissions

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from rolegate.models.role import Role  # noqa: F401
from rolegate.models.permission import Permission  # noqa: F401
from rolegate.models.role_permission import RolePermission  # noqa: F401
