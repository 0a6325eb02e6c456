"""Public user projections. Password fields are never part of these."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class UserOut(BaseModel):
    """User as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_name: str
    email: str
    role: str
    cave: Any = None
    ship: Any = None
    resources: Any = None
    reputation: Any = None
    password_changed_at: datetime | None = None
    last_resource_update: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserData(BaseModel):
    user: UserOut


class UserResponse(BaseModel):
    """Response for GET /users/{id} and GET /users/me."""

    status: Literal["success"] = "success"
    data: UserData


class UsersData(BaseModel):
    users: list[UserOut]


class UsersListResponse(BaseModel):
    """Response for GET /users."""

    status: Literal["success"] = "success"
    results: int
    data: UsersData
