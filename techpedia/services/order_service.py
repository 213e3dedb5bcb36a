# techpedia/services/order_service.py
import logging
import uuid

from sqlmodel import Session

from techpedia.core.errors import NotFound, ValidationError
from techpedia.core.money import line_total
from techpedia.models.order import FAILED, Order, OrderItem, PENDING
from techpedia.repositories.order_repo import OrderRepository
from techpedia.repositories.product_repo import ProductRepository
from techpedia.schemas.order import (
    OrderItemRead,
    OrderRead,
    OrderWithItemsRead,
)

logger = logging.getLogger(__name__)


class OrderService:
    """
    Business logic for reading orders and moving their payment status.

    Responsibilities:
      - customer and admin order queries
      - payment status state machine (PENDING -> PAID | FAILED)
      - releasing reserved stock when an order fails
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo

    # -------- User-facing operations --------

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        """
        List orders for the given user (without items).
        """
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        # Pydantic/SQLModel will map to OrderRead automatically via response_model.
        return orders  # type: ignore[return-value]

    def recent_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        limit: int = 5,
    ) -> list[OrderWithItemsRead]:
        orders = self.order_repo.list_for_user(session, user_id, 0, limit)
        return [
            self.build_order_with_items(order, self.order_repo.list_items_for_order(session, order.id))
            for order in orders
        ]

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise NotFound("Order not found")

        items = self.order_repo.list_items_for_order(session, order.id)
        return self.build_order_with_items(order, items)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        payment_status: str | None = None,
    ) -> list[OrderRead]:
        orders = self.order_repo.list_all(session, skip, limit, payment_status)
        return orders  # type: ignore[return-value]

    def get_order_admin(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFound("Order not found")
        items = self.order_repo.list_items_for_order(session, order.id)
        return self.build_order_with_items(order, items)

    def update_payment_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        new_status: str,
    ) -> Order:
        """
        Record the outcome of a payment:

          PENDING -> PAID
          PENDING -> FAILED   (reserved stock goes back to the products)
          PAID / FAILED are terminal.

        Setting the current status again is a no-op. The move is applied
        only if the row is still PENDING, so a concurrent settlement wins
        and this call reports the conflict.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFound("Order not found")

        if order.payment_status == new_status:
            return order

        if not order.can_transition_to(new_status):
            raise ValidationError(
                f"Invalid payment status transition: {order.payment_status} -> {new_status}"
            )

        if new_status == FAILED:
            moved = self.fail_order(session, order)
        else:
            moved = self.order_repo.transition_status(session, order.id, PENDING, new_status)

        session.commit()
        session.refresh(order)
        if not moved and order.payment_status != new_status:
            raise ValidationError(
                f"Invalid payment status transition: {order.payment_status} -> {new_status}"
            )

        logger.info("Order %s payment status -> %s", order.id, order.payment_status)
        return order

    def fail_order(self, session: Session, order: Order) -> bool:
        """
        Mark the order FAILED and restock its items, if it is still PENDING
        in the database. No commit.

        Returns:
            False if another transaction settled the order first.
        """
        if not self.order_repo.transition_status(session, order.id, PENDING, FAILED):
            logger.info("Order %s was settled concurrently; not failing it", order.id)
            return False
        for item in self.order_repo.list_items_for_order(session, order.id):
            self.product_repo.increment_stock(session, item.product_id, item.quantity)
        return True

    # -------- Helper DTO builder --------

    def build_order_with_items(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        return OrderWithItemsRead(
            id=order.id,
            user_id=order.user_id,
            total_amount=order.total_amount,
            payment_status=order.payment_status,  # Literal
            payment_method=order.payment_method,
            invoice_url=order.invoice_url,
            created_at=order.created_at,
            items=[
                OrderItemRead(
                    id=it.id,
                    order_id=it.order_id,
                    product_id=it.product_id,
                    quantity=it.quantity,
                    price=it.price,
                    line_total=line_total(it.price, it.quantity),
                )
                for it in items
            ],
        )
