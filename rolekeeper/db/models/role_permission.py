"""RolePermission association model.

Binds one role to one permission. The pair is unique; ``is_active`` is a
live toggle that suspends the binding without removing it.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from rolekeeper.db.base import Base


class RolePermission(Base):
    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    permission_id = Column(Integer, ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Audit
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    created_by = Column(String(100), nullable=True)

    # Relationships
    role = relationship("Role", back_populates="permission_bindings")
    permission = relationship("Permission", back_populates="role_bindings")

    def __repr__(self) -> str:
        state = "active" if self.is_active else "inactive"
        return f"<RolePermission role={self.role_id} permission={self.permission_id} {state}>"
