"""Request/response schemas for auth endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from caveworld.schemas.user import UserOut


# Fields are optional here so that missing values reach the auth service and
# fail with its 400 "Please provide all fields" instead of a schema error.
class SignUpRequest(BaseModel):
    """Registration payload."""

    email: str | None = Field(default=None, description="Email address")
    user_name: str | None = Field(default=None, description="Username (3-20 chars)")
    password: str | None = Field(default=None, description="Password (at least 8 chars, at most 72 bytes)")
    password_confirm: str | None = Field(default=None, description="Repeat of password")


class SignInRequest(BaseModel):
    """Credentials for sign-in."""

    email: str | None = Field(default=None, description="Email address")
    password: str | None = Field(default=None, description="Password")


class SignUpData(BaseModel):
    user: UserOut


class SignUpResponse(BaseModel):
    """Returned after registration; the token is also set as the jwt cookie."""

    status: Literal["success"] = "success"
    message: str
    token: str
    data: SignUpData


class SignInResponse(BaseModel):
    """Returned after sign-in; the token is also set as the jwt cookie."""

    status: Literal["success"] = "success"
    message: str
    token: str
