# techpedia/core/security.py
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import jwt, JWTError

from techpedia.core.config import get_settings
from techpedia.core.errors import Unauthorized

settings = get_settings()

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def hash_password(password: str, rounds: int = 10) -> str:
    """
    Hash a plain password with bcrypt.

    Admin accounts are created with more rounds (12) than customers (10).
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash in the database
        return False


def _encode(claims: dict[str, Any], secret: str, expires_minutes: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
        # unique token id so two tokens issued in the same second differ
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALG)


def create_access_token(user_id: uuid.UUID, email: str, role: str) -> str:
    return _encode(
        {"sub": str(user_id), "email": email, "role": role, "type": ACCESS_TOKEN},
        settings.JWT_SECRET,
        settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def create_refresh_token(user_id: uuid.UUID) -> str:
    return _encode(
        {"sub": str(user_id), "type": REFRESH_TOKEN},
        settings.JWT_REFRESH_SECRET,
        settings.REFRESH_TOKEN_EXPIRE_MINUTES,
    )


def decode_token(token: str, token_type: str = ACCESS_TOKEN) -> dict[str, Any]:
    """
    Decode and verify a JWT issued by this service.

    Verification:
      - signature (JWT_SECRET or JWT_REFRESH_SECRET depending on type)
      - expiration time (exp)
      - the "type" claim matches what the caller expects

    Raises:
        Unauthorized: if the token is invalid, expired or of the wrong type.
    """
    secret = settings.JWT_SECRET if token_type == ACCESS_TOKEN else settings.JWT_REFRESH_SECRET
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALG])
    except JWTError:
        raise Unauthorized("Invalid or expired token")

    if payload.get("type") != token_type:
        raise Unauthorized("Invalid token type")
    return payload


def token_expiry(payload: dict[str, Any]) -> datetime:
    """Return the `exp` claim as an aware UTC datetime."""
    return datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
