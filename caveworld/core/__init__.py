"""Core app configuration, database, errors and security."""

from caveworld.core.config import get_settings, settings
from caveworld.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
