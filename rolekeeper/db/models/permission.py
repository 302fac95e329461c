"""Permission database model.

A permission is an atomic named capability. ``system_name`` is the stable
key every access check uses; ``id`` is only a surrogate.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from rolekeeper.db.base import Base


class Permission(Base):
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(String(250), nullable=False, default="")
    category = Column(String(50), nullable=False, index=True)
    system_name = Column(String(100), unique=True, nullable=False, index=True)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    # Audit
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    created_by = Column(String(100), nullable=True)

    # Relationships
    role_bindings = relationship("RolePermission", back_populates="permission", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Permission {self.system_name}>"
