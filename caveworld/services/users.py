"""Read-only user lookups."""

from caveworld.core.errors import NotFoundError
from caveworld.models.user import User
from caveworld.repositories.user_repository import UserRepository


def list_users(users: UserRepository) -> list[User]:
    return users.list_all()


def get_user(users: UserRepository, user_id: str) -> User:
    """Return the user or raise NotFoundError. A malformed id raises CastError."""
    user = users.find_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
