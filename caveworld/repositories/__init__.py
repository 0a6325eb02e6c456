"""Persistence adapters."""

from caveworld.repositories.user_repository import UserRepository

__all__ = ["UserRepository"]
