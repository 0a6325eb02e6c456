"""Error taxonomy for the auth core.

Every expected failure is an ``AppError`` subclass that carries its HTTP status,
a stable machine-readable code and whether it is operational (safe to show the
client verbatim). The API layer turns any exception into one of these before
rendering a response; see ``caveworld.api.errors``.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors with a defined HTTP status and client message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    is_operational: bool = True

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        if status_code is not None:
            self.status_code = status_code

    @property
    def status(self) -> str:
        """'fail' for client errors, 'error' for server errors."""
        return "fail" if self.status_code < 500 else "error"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"status_code={self.status_code}, field={self.field!r})"
        )


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTHENTICATION_FAILED"


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class PayloadTooLargeError(AppError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = "PAYLOAD_TOO_LARGE"


class ConfigurationError(AppError):
    """Missing or invalid server configuration. Raised at startup."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "CONFIGURATION_ERROR"


class PersistenceError(AppError):
    """Database failure. ``retryable`` marks timeouts and lost connections."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "PERSISTENCE_ERROR"

    def __init__(self, message: str, *, retryable: bool = False, **kwargs) -> None:
        if retryable:
            kwargs.setdefault("status_code", status.HTTP_503_SERVICE_UNAVAILABLE)
        super().__init__(message, **kwargs)
        self.retryable = retryable


class UnknownError(AppError):
    """Unexpected failure. The client only ever sees a generic message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"
    is_operational = False


class CastError(ValueError):
    """Raised by the data layer when a value cannot be cast to a column type."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Cannot cast {value!r} for field {field!r}")
        self.field = field
        self.value = value
