"""Role database model.

Preset roles are seeded at initialization and can never be deleted or
converted to custom roles. ``version`` is bumped on every change to the
role or its permission set so concurrent writers are detected on flush.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from rolekeeper.db.base import Base


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(250), nullable=False, default="")
    is_preset = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    display_order = Column(Integer, nullable=False, default=0)

    # Audit
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    created_by = Column(String(100), nullable=True)
    updated_at = Column(DateTime, nullable=True)
    updated_by = Column(String(100), nullable=True)

    # Optimistic concurrency token
    version = Column(Integer, nullable=False)

    # Relationships
    permission_bindings = relationship(
        "RolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    user_assignments = relationship("UserRoleAssignment", back_populates="role")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        kind = "preset" if self.is_preset else "custom"
        return f"<Role {self.name} ({kind})>"
