# techpedia/routers/auth.py
from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlmodel import Session

from techpedia.core.auth import get_bearer_token, get_current_user, require_admin, require_auth
from techpedia.database import get_session
from techpedia.models.user import User
from techpedia.routers.dependencies import auth_service
from techpedia.schemas.common import MessageResponse
from techpedia.schemas.user import (
    AccessTokenResponse,
    AdminCreate,
    AuthResponse,
    LoginRequest,
    MeResponse,
    RefreshRequest,
    RegisterRequest,
    UserRead,
)

router = APIRouter(prefix="/auth", tags=["Auth"])

REFRESH_COOKIE = "refreshToken"


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
):
    """
    Create a customer account. Returns the user and an access token.
    """
    return auth_service.register(session, payload)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    response: Response,
    session: Session = Depends(get_session),
):
    """
    Exchange email + password for tokens.

    The refresh token is returned in the body and also set as an
    httpOnly cookie.
    """
    result = auth_service.login(session, payload)
    response.set_cookie(
        REFRESH_COOKIE,
        result.refresh_token,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return result


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(
    payload: RefreshRequest | None = None,
    refresh_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    session: Session = Depends(get_session),
):
    """
    Issue a new access token from a refresh token (body or cookie).
    """
    token = (payload.refresh_token if payload else None) or refresh_cookie
    return auth_service.refresh(session, token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    token: str | None = Depends(get_bearer_token),
    current_user: User | None = Depends(get_current_user),
    refresh_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    session: Session = Depends(get_session),
):
    """
    Revoke the caller's token. Anonymous callers are told they are
    already logged out.
    """
    response.delete_cookie(REFRESH_COOKIE, path="/")
    if current_user is None or token is None:
        return MessageResponse(message="Already logged out")

    auth_service.logout(session, current_user, token, refresh_cookie)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=MeResponse)
def read_me(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Return the authenticated user's profile.

    Customers additionally get their 5 most recent orders and their cart.
    """
    return auth_service.me(session, current_user)


# -------- Admin bootstrap --------


@router.post(
    "/admin",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_admin(
    payload: AdminCreate,
    session: Session = Depends(get_session),
):
    """
    Create another admin account (admin only).
    """
    return auth_service.create_admin(session, payload)


@router.get(
    "/admin",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
def list_admins(session: Session = Depends(get_session)):
    """
    List admin accounts, newest first (admin only).
    """
    return auth_service.list_admins(session)
