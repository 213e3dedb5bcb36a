# techpedia/services/cart_service.py
import logging
import uuid

from sqlmodel import Session

from techpedia.core.errors import AccessDenied, InsufficientStock, NotFound, ValidationError
from techpedia.core.money import line_total, round_money
from techpedia.models.cart import CartItem
from techpedia.models.product import Product
from techpedia.repositories.cart_repo import CartRepository
from techpedia.repositories.product_repo import ProductRepository
from techpedia.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartLineRead,
    CartProduct,
    CartSummary,
)

logger = logging.getLogger(__name__)


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - ensure only customers use cart (via router dependency)
      - validate product existence
      - enforce quantity <= current product stock on every mutation
      - enforce ownership of cart lines
      - compute cart totals
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise NotFound("Product not found")
        return product

    def _get_owned_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        item_id: uuid.UUID,
    ) -> CartItem:
        item = self.cart_repo.get_by_id(session, item_id)
        if not item:
            raise NotFound("Cart item not found")
        if item.user_id != user_id:
            raise AccessDenied("Access denied: this cart item does not belong to you")
        return item

    @staticmethod
    def _check_quantity(quantity: int) -> None:
        if quantity < 1:
            raise ValidationError("Quantity must be a positive integer")

    # ---- public operations ----

    def list_items(
        self,
        session: Session,
        user_id: uuid.UUID,
    ) -> CartSummary:
        """
        Return the user's cart:
          - every line with a snapshot of its product (current price/stock)
          - total_price = sum(price * quantity), rounded half-up to 2 dp
          - item_count = number of lines
        """
        rows = self.cart_repo.list_with_products(session, user_id)

        lines: list[CartLineRead] = []
        total = 0
        for item, product in rows:
            total += line_total(product.price, item.quantity)
            lines.append(
                CartLineRead(
                    id=item.id,
                    user_id=item.user_id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    created_at=item.created_at,
                    product=CartProduct(
                        id=product.id,
                        name=product.name,
                        price=product.price,
                        image_url=product.image_url,
                        stock=product.stock,
                    ),
                )
            )

        return CartSummary(
            items=lines,
            total_price=round_money(total),
            item_count=len(lines),
        )

    def add_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemCreate,
    ) -> tuple[CartItem, bool]:
        """
        Add a product to the user's cart.

        Rules:
          - quantity >= 1
          - product must exist
          - first add: quantity <= stock
          - later adds: existing quantity + quantity <= stock

        Returns:
            (cart item, True if a new line was created)
        """
        self._check_quantity(payload.quantity)
        product = self._get_product(session, payload.product_id)

        if payload.quantity > product.stock:
            raise InsufficientStock(
                "Not enough stock available",
                product_id=str(product.id),
                available=product.stock,
            )

        existing = self.cart_repo.get_item(session, user_id, payload.product_id)

        if existing:
            new_qty = existing.quantity + payload.quantity
            if new_qty > product.stock:
                raise InsufficientStock(
                    "Cannot add this quantity. It exceeds available stock.",
                    product_id=str(product.id),
                    current_in_cart=existing.quantity,
                    available=product.stock,
                )
            existing.quantity = new_qty
            return self.cart_repo.update(session, existing), False

        item = CartItem(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
        logger.info("User %s added product %s to cart", user_id, product.id)
        return self.cart_repo.create(session, item), True

    def update_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        item_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartItem:
        """
        Set the quantity of one of the user's cart lines.

        If quantity exceeds current product stock => InsufficientStock.
        """
        self._check_quantity(payload.quantity)
        item = self._get_owned_item(session, user_id, item_id)
        product = self._get_product(session, item.product_id)

        if payload.quantity > product.stock:
            raise InsufficientStock(
                "Not enough stock available",
                product_id=str(product.id),
                available=product.stock,
            )

        item.quantity = payload.quantity
        return self.cart_repo.update(session, item)

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        item_id: uuid.UUID,
    ) -> None:
        item = self._get_owned_item(session, user_id, item_id)
        self.cart_repo.delete(session, item)

    def clear_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
    ) -> CartSummary:
        """
        Clear all items from the cart and return an empty summary.
        """
        self.cart_repo.clear_user_cart(session, user_id)
        return CartSummary(items=[], total_price=round_money(0), item_count=0)
