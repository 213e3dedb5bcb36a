# techpedia/routers/cart.py
import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from techpedia.core.auth import require_customer
from techpedia.database import get_session
from techpedia.models.user import User
from techpedia.routers.dependencies import cart_service
from techpedia.schemas.cart import (
    CartItemCreate,
    CartItemRead,
    CartItemResult,
    CartItemUpdate,
    CartSummary,
)
from techpedia.schemas.common import MessageResponse

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartSummary)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Get current user's cart with product snapshots and total price.

    Auth:
      - Only CUSTOMER accounts can access.
      - Admins are forbidden.
    """
    return cart_service.list_items(session, current_user.id)


@router.post("", response_model=CartItemResult, status_code=status.HTTP_201_CREATED)
def add_to_cart(
    payload: CartItemCreate,
    response: Response,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Add product to the current user's cart.

    201 when a new line is created, 200 when an existing line grows.
    """
    item, created = cart_service.add_item(session, current_user.id, payload)
    if not created:
        response.status_code = status.HTTP_200_OK
        return CartItemResult(message="Cart item updated", data=CartItemRead.model_validate(item))
    return CartItemResult(message="Item added to cart", data=CartItemRead.model_validate(item))


@router.put("/{item_id}", response_model=CartItemRead)
def update_cart_item(
    item_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Set the quantity of one cart line.
    """
    return cart_service.update_quantity(
        session=session,
        user_id=current_user.id,
        item_id=item_id,
        payload=payload,
    )


@router.delete("/{item_id}", response_model=MessageResponse)
def remove_cart_item(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Remove one line from the cart.
    """
    cart_service.remove_item(session, current_user.id, item_id)
    return MessageResponse(message="Cart item removed successfully")


@router.delete("", response_model=CartSummary)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Clear the entire cart.

    Returns an empty cart summary.
    """
    return cart_service.clear_cart(session, current_user.id)
