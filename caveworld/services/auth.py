"""Sign-up and sign-in: validation, password hashing, token issuance."""

import hmac
import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from email_validator import EmailNotValidError, validate_email

from caveworld.core.errors import AuthenticationError, ConflictError, ValidationError
from caveworld.core.security import (
    PASSWORD_MAX_BYTES,
    PASSWORD_MIN_LEN,
    USER_NAME_MAX_LEN,
    USER_NAME_MIN_LEN,
    TokenIssuer,
    burn_password_check,
    hash_password,
    verify_password,
)
from caveworld.models.user import User
from caveworld.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Please provide all fields"
PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"
USER_EXISTS_MESSAGE = "User already exists"
# Same message for unknown email and wrong password.
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"

SIGNUP_MESSAGE = "Registration successful"
SIGNIN_MESSAGE = "Login successful"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful sign-up or sign-in."""

    token: str
    message: str
    user: User | None = None


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def normalize_email(email: str) -> str:
    """Trim, validate syntax and lowercase an email address."""
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Please provide a valid email", field="email") from None
    return result.normalized.lower()


def validate_user_name(user_name: str) -> str:
    user_name = user_name.strip()
    if len(user_name) < USER_NAME_MIN_LEN:
        raise ValidationError(
            f"Username must be at least {USER_NAME_MIN_LEN} characters long",
            field="user_name",
        )
    if len(user_name) > USER_NAME_MAX_LEN:
        raise ValidationError(
            f"Username must be at most {USER_NAME_MAX_LEN} characters long",
            field="user_name",
        )
    return user_name


def validate_password(password: str) -> str:
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LEN} characters long",
            field="password",
        )
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(
            f"Password must be at most {PASSWORD_MAX_BYTES} bytes long",
            field="password",
        )
    return password


def build_user(email: str, user_name: str, password: str, role: str = "user") -> User:
    """Validate fields and return an unsaved User with a hashed password.

    Raises ValidationError for bad input. Defaults and timestamps are set here
    rather than by ORM hooks so every caller gets the same record.
    """
    email = normalize_email(email)
    user_name = validate_user_name(user_name)
    validate_password(password)
    now = datetime.now(UTC)
    return User(
        id=str(uuid.uuid4()),
        email=email,
        user_name=user_name,
        password_hash=hash_password(password),
        password_changed_at=now,
        role=role,
        last_resource_update=now,
        created_at=now,
        updated_at=now,
    )


class AuthService:
    """Orchestrates sign-up and sign-in against a user store and a token issuer."""

    def __init__(self, users: UserRepository, issuer: TokenIssuer) -> None:
        self._users = users
        self._issuer = issuer

    def sign_up(
        self,
        email: str | None,
        user_name: str | None,
        password: str | None,
        password_confirm: str | None,
    ) -> AuthResult:
        if any(_is_blank(v) for v in (email, user_name, password, password_confirm)):
            raise ValidationError(MISSING_FIELDS_MESSAGE)
        if not hmac.compare_digest(password.encode("utf-8"), password_confirm.encode("utf-8")):
            raise ValidationError(PASSWORD_MISMATCH_MESSAGE, field="password_confirm")

        user = build_user(email, user_name, password)
        if self._users.find_by_email_or_user_name(user.email, user.user_name) is not None:
            raise ConflictError(USER_EXISTS_MESSAGE)

        # Unique indexes catch a concurrent sign-up that passed the check above.
        user = self._users.create(user)
        token = self._issuer.issue(user.id)
        logger.info("User signed up", extra={"user_id": user.id})
        return AuthResult(token=token, message=SIGNUP_MESSAGE, user=user)

    def sign_in(self, email: str | None, password: str | None) -> AuthResult:
        if _is_blank(email) or not password:
            raise ValidationError(MISSING_FIELDS_MESSAGE)

        # Same normalization as sign-up; a malformed email is just another miss.
        try:
            email = normalize_email(email)
        except ValidationError:
            burn_password_check(password)
            logger.warning("Sign-in rejected: malformed email")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE) from None

        user = self._users.find_by_email(email, include_password=True)
        if user is None:
            burn_password_check(password)
            logger.warning("Sign-in rejected: unknown email")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        if not verify_password(password, user.password_hash):
            logger.warning("Sign-in rejected: bad password", extra={"user_id": user.id})
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        token = self._issuer.issue(user.id)
        logger.info("User signed in", extra={"user_id": user.id})
        return AuthResult(token=token, message=SIGNIN_MESSAGE)
