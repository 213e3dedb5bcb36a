# techpedia/routers/checkout.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from techpedia.core.auth import require_customer
from techpedia.core.payment_gateway import PaymentGateway, get_gateway
from techpedia.database import get_session
from techpedia.models.user import User
from techpedia.routers.dependencies import checkout_service
from techpedia.schemas.order import CheckoutResponse

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutResponse)
def checkout(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
    gateway: PaymentGateway = Depends(get_gateway),
):
    """
    Turn the current user's cart into a PENDING order and return the
    payment page URL.

    Errors:
      - 400 EMPTY_CART / INSUFFICIENT_STOCK (nothing is written)
      - 500 GATEWAY_ERROR: the order exists and is PENDING; call
        POST /orders/{order_id}/invoice to retry
      - 500 PERSISTENCE_ERROR
    """
    return checkout_service.checkout(session, current_user, gateway)
