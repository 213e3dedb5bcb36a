# techpedia/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from techpedia.schemas.cart import CartSummary
from techpedia.schemas.common import PaginationMeta
from techpedia.schemas.order import OrderWithItemsRead

Role = Literal["CUSTOMER", "ADMIN"]


class UserRead(SQLModel):
    """Response schema returned to clients (never includes the hash)."""

    id: uuid.UUID
    name: str
    email: str
    role: Role
    created_at: datetime
    updated_at: datetime


class UserPage(SQLModel):
    data: list[UserRead]
    meta: PaginationMeta


class RegisterRequest(SQLModel):
    """
    Payload for customer self-registration.

    Validation rules:
      - email must be a valid EmailStr
      - name cannot be empty or whitespace
      - password must be at least 6 characters
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class AdminCreate(RegisterRequest):
    """Admin accounts need a stronger password."""

    password: str = Field(min_length=8)


class LoginRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: str
    password: str


class RefreshRequest(SQLModel):
    refresh_token: str | None = None


class AuthResponse(SQLModel):
    user: UserRead
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"


class AccessTokenResponse(SQLModel):
    access_token: str
    token_type: str = "bearer"


class MeResponse(UserRead):
    """
    Current user profile. Customers also get their latest orders and cart.
    """

    orders: list[OrderWithItemsRead] | None = None
    cart: CartSummary | None = None
