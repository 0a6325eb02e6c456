"""ORM model for player accounts (auth, roles, opaque game state)."""

from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, String

from caveworld.models.base import Base


def utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """
    Player account for JWT authentication and role-based access control.

    role: 'admin' or 'user'
    cave, ship, resources, reputation: game state, stored as-is and never
    interpreted by the auth code.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    user_name = Column(String(20), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    password_changed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    password_reset_token = Column(String(255), nullable=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)
    role = Column(String(32), nullable=False, default="user")
    cave = Column(JSON, nullable=True)
    resources = Column(JSON, nullable=True)
    ship = Column(JSON, nullable=True)
    reputation = Column(JSON, nullable=True)
    last_resource_update = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
