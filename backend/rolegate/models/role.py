"""Role ORM — named bundle of permissions with an enablement flag.

Invariants:
    - name is unique (ix_roles_name)
    - is_enabled is 0/1; any value other than 1 authorizes nothing
    - is_system marks seeded roles that the admin surface must not delete

Design Decisions:
    - 0/1 SmallInteger flags over Boolean: matches the existing schema consumers
    - permissions relationship is lazy="raise": authorization reads go through the
      one-join repository query, never an implicit relationship fetch
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, SmallInteger, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegate.db.base import Base


class Role(Base):
    """Role — owns zero-or-more RolePermission associations."""
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True,
    )
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_system: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_enabled: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=1)
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

    # Relationships
    permissions: Mapped[list["RolePermission"]] = relationship(
        "RolePermission", back_populates="role",
        cascade="all, delete-orphan", passive_deletes=True, lazy="raise",
    )
