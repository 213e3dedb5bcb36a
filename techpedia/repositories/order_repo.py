# techpedia/repositories/order_repo.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import update
from sqlmodel import Session, col, select

from techpedia.models.order import Order, OrderItem, PENDING


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(col(Order.created_at).desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        payment_status: str | None = None,
    ) -> list[Order]:
        stmt = select(Order)
        if payment_status:
            stmt = stmt.where(Order.payment_status == payment_status)
        stmt = stmt.order_by(col(Order.created_at).desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def list_stale_pending(self, session: Session, cutoff: datetime) -> list[Order]:
        """PENDING orders that never got an invoice and were created before cutoff."""
        stmt = select(Order).where(
            Order.payment_status == PENDING,
            col(Order.invoice_id).is_(None),
            Order.created_at < cutoff,
        )
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        return order

    def transition_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        from_status: str,
        to_status: str,
    ) -> bool:
        """
        Move payment_status only if it still equals `from_status`.
        Returns False when another transaction got there first. No commit.
        """
        result = session.exec(
            update(Order)
            .where(Order.id == order_id, Order.payment_status == from_status)
            .values(payment_status=to_status, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def attach_invoice(
        self,
        session: Session,
        order_id: uuid.UUID,
        invoice_id: str,
        invoice_url: str,
    ) -> bool:
        """
        Store the invoice on a still-PENDING order. Returns False if the
        order has been settled meanwhile. No commit.
        """
        result = session.exec(
            update(Order)
            .where(Order.id == order_id, Order.payment_status == PENDING)
            .values(
                invoice_id=invoice_id,
                invoice_url=invoice_url,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id)
        return list(session.exec(stmt).all())

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        return items
