"""User model."""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String

from app.database import Base


class Role(str, enum.Enum):
    """Account roles. There is no hierarchy: each check names the role it needs."""

    USER = "user"
    SUPER_ADMIN = "superadmin"


class User(Base):
    """Application user."""

    __tablename__ = "user"
    # Never reuse ids of deleted rows.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    full_name = Column(String(256), nullable=False)
    password_hash = Column(String(256), nullable=False)
    role = Column(
        Enum(Role, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.USER,
    )
    avatar_url = Column(String(1024), nullable=True)
    refresh_token = Column(String(1024), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
