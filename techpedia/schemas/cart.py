# techpedia/schemas/cart.py
import uuid
from datetime import datetime
from decimal import Decimal

from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.
    """

    product_id: uuid.UUID
    quantity: int = Field(ge=1)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    """

    quantity: int = Field(ge=1)


class CartProduct(SQLModel):
    """
    Product snapshot shown next to a cart line.
    """

    id: uuid.UUID
    name: str
    price: Decimal
    image_url: str | None = None
    stock: int


class CartItemRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    created_at: datetime


class CartLineRead(CartItemRead):
    product: CartProduct


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLineRead]
    total_price: Decimal
    item_count: int


class CartItemResult(SQLModel):
    message: str
    data: CartItemRead
