"""Password hashing and JWT creation/verification for authentication."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from caveworld.core.errors import ConfigurationError

if TYPE_CHECKING:
    from caveworld.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12
# bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72

# Min/max lengths for input validation (mirrors the users table constraints).
USER_NAME_MIN_LEN = 3
USER_NAME_MAX_LEN = 20
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_BYTES = BCRYPT_MAX_BYTES

REQUIRED_CLAIMS = ["sub", "iss", "iat", "exp"]


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords.

    Raises ValueError for input longer than bcrypt's 72-byte limit; callers
    validate length first.
    """
    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > BCRYPT_MAX_BYTES:
        raise ValueError(f"password exceeds {BCRYPT_MAX_BYTES} bytes")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash.

    Input over 72 bytes never matches, even when its first 72 bytes do.
    """
    if not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")
    # Still run the full check on oversized input so it costs the same time.
    too_long = len(pw_bytes) > BCRYPT_MAX_BYTES
    try:
        matched = bcrypt.checkpw(pw_bytes[:BCRYPT_MAX_BYTES], hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False
    return matched and not too_long


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("caveworld-timing-equalizer")


def burn_password_check(plain_password: str) -> None:
    """Run a full bcrypt verification against a throwaway hash.

    Used when no user matches a sign-in so the response takes as long as a
    real password check.
    """
    verify_password(plain_password, _dummy_hash())


class TokenIssuer:
    """Mints and verifies signed, time-limited session tokens (JWT)."""

    def __init__(self, settings: "Settings") -> None:
        if settings.JWT_SECRET is None or not settings.JWT_SECRET.get_secret_value():
            raise ConfigurationError("JWT_SECRET is not configured")
        if not settings.JWT_ALGORITHM:
            raise ConfigurationError("JWT_ALGORITHM is not configured")
        if not settings.JWT_ISSUER:
            raise ConfigurationError("JWT_ISSUER is not configured")
        if not settings.JWT_EXPIRE_MINUTES or settings.JWT_EXPIRE_MINUTES < 1:
            raise ConfigurationError("JWT_EXPIRE_MINUTES is not configured")
        self._secret = settings.JWT_SECRET.get_secret_value()
        self._algorithm = settings.JWT_ALGORITHM
        self._issuer = settings.JWT_ISSUER
        self._lifetime = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)

    def issue(self, user_id: str) -> str:
        """Create a JWT with sub (user id), iss, iat and exp."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "iss": self._issuer,
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """
        Decode and validate a JWT; return its payload.
        Raises jwt.PyJWTError on bad signature, wrong issuer, or expired token.
        """
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            issuer=self._issuer,
            options={"require": REQUIRED_CLAIMS},
        )
