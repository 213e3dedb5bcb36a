# techpedia/models/order.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field

PENDING = "PENDING"
PAID = "PAID"
FAILED = "FAILED"

# PAID and FAILED are terminal
PAYMENT_TRANSITIONS: dict[str, set[str]] = {
    PENDING: {PAID, FAILED},
    PAID: set(),
    FAILED: set(),
}


class Order(SQLModel, table=True):
    """
    Customer order created from a cart at checkout.

    total_amount is a snapshot of the cart total at order time and always
    equals the sum of its items' price * quantity.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    total_amount: Decimal = Field(
        ge=0,
        max_digits=14,
        decimal_places=2,
        description="Sum of line items at order time",
    )

    # PENDING | PAID | FAILED
    payment_status: str = Field(
        default=PENDING,
        index=True,
        description="Payment status lifecycle",
    )

    payment_method: str = Field(
        default="XENDIT",
        description="Payment provider tag",
    )

    invoice_id: str | None = Field(
        default=None,
        index=True,
        description="Gateway invoice id, set once the invoice exists",
    )

    invoice_url: str | None = Field(
        default=None,
        description="Hosted invoice page for the customer",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last update timestamp (UTC)",
    )

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in PAYMENT_TRANSITIONS.get(self.payment_status, set())


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order. Immutable after creation.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price: Decimal = Field(
        ge=0,
        max_digits=12,
        decimal_places=2,
        description="Unit price at time of order",
    )
