"""SQLAlchemy ORM models."""

from caveworld.models.base import Base
from caveworld.models.user import User

__all__ = ["Base", "User"]
