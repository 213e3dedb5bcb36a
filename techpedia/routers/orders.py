# techpedia/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from techpedia.core.auth import require_admin, require_customer
from techpedia.core.payment_gateway import PaymentGateway, get_gateway
from techpedia.database import get_session
from techpedia.models.user import User
from techpedia.routers.dependencies import checkout_service, order_service
from techpedia.schemas.order import (
    CheckoutResponse,
    OrderRead,
    OrderWithItemsRead,
    PaymentStatus,
    PaymentStatusUpdate,
    ReconcileResult,
)

router = APIRouter(prefix="/orders", tags=["Orders"])


# -------- User-facing endpoints --------


@router.get(
    "/me",
    response_model=list[OrderRead],
)
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
):
    """
    List the authenticated user's orders (without items).
    """
    return order_service.list_user_orders(session, current_user.id, skip, limit)


@router.get(
    "/me/{order_id}",
    response_model=OrderWithItemsRead,
)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Get a single order (with items) belonging to the current user.
    """
    return order_service.get_user_order(session, current_user.id, order_id)


@router.post(
    "/{order_id}/invoice",
    response_model=CheckoutResponse,
)
def retry_invoice(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
    gateway: PaymentGateway = Depends(get_gateway),
):
    """
    Get (or create, if checkout could not) the invoice for a PENDING order.

    Use this after a checkout answered GATEWAY_ERROR instead of checking
    out again.
    """
    return checkout_service.retry_invoice(session, current_user, order_id, gateway)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
    payment_status: PaymentStatus | None = None,
):
    """
    List all orders (admin only).
    """
    return order_service.list_all_orders(session, skip, limit, payment_status)


@router.post(
    "/reconcile",
    response_model=ReconcileResult,
    dependencies=[Depends(require_admin)],
)
def reconcile_orders(
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_gateway),
    older_than_minutes: int | None = Query(default=None, ge=0),
):
    """
    Fail PENDING orders that never got an invoice and release their stock
    (admin only). Defaults to STALE_ORDER_MINUTES.
    """
    expired = checkout_service.expire_stale_orders(session, gateway, older_than_minutes)
    return ReconcileResult(expired_order_ids=expired)


@router.get(
    "/{order_id}",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_admin)],
)
def get_order_admin(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get any order with items (admin only).
    """
    return order_service.get_order_admin(session, order_id)


@router.patch(
    "/{order_id}/payment-status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_payment_status(
    order_id: uuid.UUID,
    payload: PaymentStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Record a payment outcome (admin only).

      PENDING -> PAID

      PENDING -> FAILED (stock is released)

      PAID / FAILED -> (no change)
    """
    return order_service.update_payment_status(session, order_id, payload.payment_status)
