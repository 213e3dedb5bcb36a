# techpedia/schemas/order.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

PaymentStatus = Literal["PENDING", "PAID", "FAILED"]


class CheckoutResponse(SQLModel):
    """
    Result of a successful checkout: where to send the customer to pay.
    """

    order_id: uuid.UUID
    invoice_url: str
    total_amount: Decimal


class OrderItemRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    price: Decimal
    line_total: Decimal


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    total_amount: Decimal
    payment_status: PaymentStatus
    payment_method: str
    invoice_url: str | None
    created_at: datetime


class OrderWithItemsRead(OrderRead):
    items: list[OrderItemRead]


class ReconcileResult(SQLModel):
    expired_order_ids: list[uuid.UUID]


class PaymentStatusUpdate(SQLModel):
    """
    Admin payload to record a payment outcome.
    """

    model_config = ConfigDict(extra="forbid")

    payment_status: Literal["PAID", "FAILED"]
