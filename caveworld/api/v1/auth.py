"""Sign-up/sign-in endpoints and auth dependencies (get_current_user, require_admin)."""

from datetime import UTC
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from caveworld.core.config import Settings
from caveworld.core.database import get_db
from caveworld.core.errors import AuthenticationError, CastError, PermissionDeniedError
from caveworld.core.security import TokenIssuer
from caveworld.models.user import User
from caveworld.repositories.user_repository import UserRepository
from caveworld.schemas.auth import (
    SignInRequest,
    SignInResponse,
    SignUpData,
    SignUpRequest,
    SignUpResponse,
)
from caveworld.schemas.error import ErrorResponse
from caveworld.schemas.user import UserOut
from caveworld.services.auth import AuthService

SESSION_COOKIE = "jwt"

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_issuer(request: Request) -> TokenIssuer:
    """Issuer built once at startup by create_app."""
    return request.app.state.token_issuer


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthService:
    return AuthService(UserRepository(db), issuer)


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """HttpOnly, SameSite=Strict; Secure in prod."""
    max_age = settings.JWT_COOKIE_EXPIRES_DAYS * 24 * 60 * 60
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        max_age=max_age,
        expires=max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post(
    "/signup",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def signup(
    body: SignUpRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SignUpResponse:
    """
    Register a new user and start a session.
    The token is returned in the body and set as the HttpOnly 'jwt' cookie.
    """
    result = service.sign_up(
        email=body.email,
        user_name=body.user_name,
        password=body.password,
        password_confirm=body.password_confirm,
    )
    set_session_cookie(response, result.token, settings)
    return SignUpResponse(
        message=result.message,
        token=result.token,
        data=SignUpData(user=UserOut.model_validate(result.user)),
    )


@router.post("/signin", response_model=SignInResponse, responses=ERROR_RESPONSES)
def signin(
    body: SignInRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SignInResponse:
    """
    Authenticate with email and password.
    Unknown email and wrong password both return the same 401.
    """
    result = service.sign_in(email=body.email, password=body.password)
    set_session_cookie(response, result.token, settings)
    return SignInResponse(message=result.message, token=result.token)


def _issued_before_password_change(user: User, issued_at: int) -> bool:
    changed_at = user.password_changed_at
    if changed_at is None:
        return False
    # SQLite drops tzinfo; stored values are always UTC.
    if changed_at.tzinfo is None:
        changed_at = changed_at.replace(tzinfo=UTC)
    return int(changed_at.timestamp()) > issued_at


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> User:
    """Dependency: require a valid token (Bearer header or jwt cookie). Raises 401 otherwise."""
    token = credentials.credentials if credentials else request.cookies.get(SESSION_COOKIE)
    if not token:
        raise AuthenticationError("You are not logged in. Please log in to get access.")
    # jwt.PyJWTError propagates; the error handlers turn it into a 401.
    payload = issuer.verify(token)
    try:
        user = UserRepository(db).find_by_id(payload["sub"])
    except CastError:
        raise AuthenticationError("Invalid token payload") from None
    if user is None:
        raise AuthenticationError("The user belonging to this token no longer exists.")
    if _issued_before_password_change(user, payload["iat"]):
        raise AuthenticationError("User recently changed password. Please log in again.")
    return user


def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != "admin":
        raise PermissionDeniedError("Admin access required")
    return current_user
