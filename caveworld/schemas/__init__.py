"""Pydantic request/response schemas."""

from caveworld.schemas.auth import (
    SignInRequest,
    SignInResponse,
    SignUpData,
    SignUpRequest,
    SignUpResponse,
)
from caveworld.schemas.error import ErrorResponse
from caveworld.schemas.health import HealthResponse
from caveworld.schemas.user import (
    UserData,
    UserOut,
    UserResponse,
    UsersData,
    UsersListResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "SignInRequest",
    "SignInResponse",
    "SignUpData",
    "SignUpRequest",
    "SignUpResponse",
    "UserData",
    "UserOut",
    "UserResponse",
    "UsersData",
    "UsersListResponse",
]
