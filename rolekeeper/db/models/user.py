"""User model: the minimal identity record behind the default user directory."""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Boolean

from rolekeeper.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(100), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
