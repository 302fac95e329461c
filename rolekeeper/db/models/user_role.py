"""UserRoleAssignment model.

Binds a user from the identity store to a role. ``user_id`` carries no
foreign key because identities live outside the RBAC catalog.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from rolekeeper.db.base import Base


class UserRoleAssignment(Base):
    __tablename__ = "user_role_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_user_role"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(100), nullable=False, index=True)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False, index=True)
    assigned_date = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    assigned_by = Column(String(100), nullable=True)

    # Relationships
    role = relationship("Role", back_populates="user_assignments")

    def __repr__(self) -> str:
        return f"<UserRoleAssignment user={self.user_id} role={self.role_id}>"
