"""SQLAlchemy-backed credential store for users."""

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, defer

from caveworld.core.errors import CastError, ConflictError, PersistenceError
from caveworld.models.user import User

logger = logging.getLogger(__name__)


def _hide_password():
    # Reading the hash from a default projection is a bug; fail loudly.
    return defer(User.password_hash, raiseload=True)


def _is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
    return "unique" in text or "duplicate" in text


class UserRepository:
    """Finds and creates users. Translates database failures into AppErrors."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_email_or_user_name(self, email: str, user_name: str) -> User | None:
        stmt = (
            select(User)
            .options(_hide_password())
            .where(or_(User.email == email, User.user_name == user_name))
            .limit(1)
        )
        return self._scalar(stmt)

    def find_by_email(self, email: str, include_password: bool = False) -> User | None:
        stmt = select(User).where(User.email == email)
        if not include_password:
            stmt = stmt.options(_hide_password())
        return self._scalar(stmt)

    def find_by_id(self, user_id: str) -> User | None:
        """Return the user with this id. Raises CastError when id is not a UUID."""
        try:
            normalized = str(uuid.UUID(str(user_id)))
        except ValueError:
            raise CastError("id", user_id) from None
        stmt = select(User).options(_hide_password()).where(User.id == normalized)
        return self._scalar(stmt)

    def list_all(self) -> list[User]:
        stmt = select(User).options(_hide_password()).order_by(User.created_at)
        try:
            return list(self._session.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise self._translate(e, "list users") from e

    def create(self, user: User) -> User:
        """Insert a user. A unique-index violation becomes ConflictError."""
        self._session.add(user)
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            if _is_unique_violation(e):
                logger.info(
                    "Sign-up lost a uniqueness race",
                    extra={"user_name": user.user_name},
                )
                raise ConflictError("User already exists") from e
            raise PersistenceError("Could not create user") from e
        except SQLAlchemyError as e:
            self._session.rollback()
            raise self._translate(e, "create user") from e
        self._session.refresh(user)
        logger.info("Created user: %s", user.id)
        return user

    def _scalar(self, stmt) -> User | None:
        try:
            return self._session.scalars(stmt).first()
        except SQLAlchemyError as e:
            raise self._translate(e, "query users") from e

    @staticmethod
    def _translate(exc: SQLAlchemyError, action: str) -> PersistenceError:
        if isinstance(exc, (OperationalError, PoolTimeoutError)):
            logger.warning("Database unavailable during %s: %s", action, exc)
            return PersistenceError(
                "Database unavailable. Please try again later.", retryable=True
            )
        logger.error("Database error during %s: %s", action, exc)
        return PersistenceError("Database error")
