# techpedia/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

CUSTOMER = "CUSTOMER"
ADMIN = "ADMIN"


class User(SQLModel, table=True):
    """
    Persistent user account.

    Role:
      - "CUSTOMER" | "ADMIN"
      - anonymous callers are represented by the absence of a token.

    `password` stores a bcrypt hash, never the plain value.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        description="Display name",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Login email (unique)",
    )

    password: str = Field(
        description="bcrypt password hash",
    )

    role: str = Field(
        default=CUSTOMER,
        index=True,
        description="Application role: CUSTOMER | ADMIN",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last update timestamp (UTC)",
    )


class InvalidToken(SQLModel, table=True):
    """
    Revoked bearer token (logout blacklist).

    Rows only matter until `expires_at`; after that the JWT itself is
    expired, so the row is ignored and eventually swept.
    """

    __tablename__ = "invalid_tokens"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    token: str = Field(
        unique=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    expires_at: datetime = Field(
        index=True,
        description="Expiry of the revoked token (UTC)",
    )
