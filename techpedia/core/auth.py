# techpedia/core/auth.py
import uuid
from datetime import datetime, timezone

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from techpedia.core.errors import AccessDenied, Unauthorized
from techpedia.core.security import decode_token
from techpedia.database import get_session
from techpedia.models.user import ADMIN, CUSTOMER, User
from techpedia.repositories.token_repo import TokenRepository
from techpedia.repositories.user_repo import UserRepository

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support anonymous callers (e.g. logout when already logged out).
bearer_scheme = HTTPBearer(auto_error=False)

token_repo = TokenRepository()
user_repo = UserRepository()


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Raw bearer token from the Authorization header, if any."""
    if credentials is None:
        return None
    return credentials.credentials


def get_current_user(
    token: str | None = Depends(get_bearer_token),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from an access token.

    Flow:
      1. If no Authorization header => anonymous => return None.
      2. Reject tokens present in the revocation store (logged out).
      3. Decode JWT => extract 'sub' (user id).
      4. Load the user row; a deleted user is treated as unauthenticated.

    Raises:
        Unauthorized: if the token is revoked, malformed or expired.
    """
    if token is None:
        return None

    if token_repo.is_revoked(session, token, datetime.now(timezone.utc)):
        raise Unauthorized("Token has been revoked")

    payload = decode_token(token)

    try:
        user_id = uuid.UUID(payload.get("sub", ""))
    except ValueError:
        raise Unauthorized("Invalid sub in token")

    user = user_repo.get_by_id(session, user_id)
    if user is None:
        raise Unauthorized("User no longer exists")
    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    Raises:
        Unauthorized: if user is None.
    """
    if user is None:
        raise Unauthorized("Unauthorized")
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Enforce admin role.

    Raises:
        AccessDenied: if role is not ADMIN.
    """
    if user.role != ADMIN:
        raise AccessDenied("Unauthorized - Admin access required")
    return user


def require_customer(user: User = Depends(require_auth)) -> User:
    """
    Enforce that only customers can access a route.

    Use this for:
      - cart endpoints
      - checkout endpoints
    Admins will be rejected with 403.
    """
    if user.role != CUSTOMER:
        raise AccessDenied("Access denied: only customers can use the cart and checkout")
    return user
