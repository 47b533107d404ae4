"""Permission ORM — atomic "<resource>:<action>" grant.

Invariants:
    - name is unique (ix_permissions_name) and equals f"{resource}:{action}"
    - resource and action hold Resource / Action enum values as plain strings
    - is_system marks seeded permissions; the seed short-circuit counts these

Design Decisions:
    - String columns over native ENUM: adding a resource needs no ALTER TYPE
    - permission_group is a display label only; authorization never reads it
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, SmallInteger, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegate.db.base import Base


class Permission(Base):
    """Permission — referenced by roles through RolePermission."""
    __tablename__ = "permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True,
    )
    resource: Mapped[str] = mapped_column(String(20), nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_system: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    permission_group: Mapped[str | None] = mapped_column(String(50), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    roles: Mapped[list["RolePermission"]] = relationship(
        "RolePermission", back_populates="permission",
        passive_deletes=True, lazy="raise",
    )
