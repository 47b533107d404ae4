"""RolePermission ORM — pure join between roles and permissions.

Invariants:
    - (role_id, permission_id) is unique (uq_role_permissions_role_permission)
    - Deleting a role or permission deletes its associations (ON DELETE CASCADE)

Design Decisions:
    - Composite unique constraint declared so the seed can upsert with
      ON CONFLICT DO NOTHING instead of find-then-insert
    - Surrogate id kept: the admin surface addresses associations by id
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegate.db.base import Base


class RolePermission(Base):
    """Association row granting one permission to one role."""
    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint(
            "role_id", "permission_id",
            name="uq_role_permissions_role_permission",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False,
    )
    permission_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    role: Mapped["Role"] = relationship("Role", back_populates="permissions")
    permission: Mapped["Permission"] = relationship(
        "Permission", back_populates="roles",
    )
