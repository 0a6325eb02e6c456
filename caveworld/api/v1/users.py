"""User listing and lookup. Sign-up/sign-in are also mounted here."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from caveworld.api.v1.auth import (
    ERROR_RESPONSES,
    get_current_user,
    require_admin,
    signin,
    signup,
)
from caveworld.core.database import get_db
from caveworld.models.user import User
from caveworld.repositories.user_repository import UserRepository
from caveworld.schemas.auth import SignInResponse, SignUpResponse
from caveworld.schemas.error import ErrorResponse
from caveworld.schemas.user import (
    UserData,
    UserOut,
    UserResponse,
    UsersData,
    UsersListResponse,
)
from caveworld.services.users import get_user, list_users

router = APIRouter()

router.add_api_route(
    "/signup",
    signup,
    methods=["POST"],
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
router.add_api_route(
    "/signin",
    signin,
    methods=["POST"],
    response_model=SignInResponse,
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=UsersListResponse)
def get_all_users(
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only)."""
    users = list_users(UserRepository(db))
    return UsersListResponse(
        results=len(users),
        data=UsersData(users=[UserOut.model_validate(u) for u in users]),
    )


@router.get("/me", response_model=UserResponse, responses={401: {"model": ErrorResponse}})
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """Return the user the session token belongs to."""
    return UserResponse(data=UserData(user=UserOut.model_validate(current_user)))


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_user_by_id(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Look up one user by id. 404 if absent, 400 if the id is malformed."""
    user = get_user(UserRepository(db), user_id)
    return UserResponse(data=UserData(user=UserOut.model_validate(user)))
