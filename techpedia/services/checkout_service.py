# techpedia/services/checkout_service.py
import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from techpedia.core.config import get_settings
from techpedia.core.errors import (
    AccessDenied,
    EmptyCart,
    GatewayError,
    InsufficientStock,
    NotFound,
    PersistenceError,
    ValidationError,
)
from techpedia.core.money import line_total, round_money
from techpedia.core.payment_gateway import InvoiceResult, PaymentGateway
from techpedia.models.cart import CartItem
from techpedia.models.order import Order, OrderItem, PENDING
from techpedia.models.product import Product
from techpedia.models.user import User
from techpedia.repositories.cart_repo import CartRepository
from techpedia.repositories.order_repo import OrderRepository
from techpedia.schemas.order import CheckoutResponse
from techpedia.services.catalog_service import CatalogService
from techpedia.services.order_service import OrderService

logger = logging.getLogger(__name__)

settings = get_settings()

PAYMENT_METHOD = "XENDIT"


def _insufficient(product: Product, requested: int, available: int) -> InsufficientStock:
    return InsufficientStock(
        "Insufficient stock",
        product_id=str(product.id),
        product_name=product.name,
        available_stock=available,
        requested_quantity=requested,
    )


class CheckoutService:
    """
    Converts a customer's cart into a PENDING order and a hosted invoice.

    Guarantees:
      - no partial order: the order, its items and the stock reservations
        are committed together or not at all
      - no oversell: stock is taken with a conditional decrement inside the
        same transaction, so concurrent checkouts cannot both succeed for
        the last unit
      - at most one invoice per order: the order id is the gateway's
        external reference and an existing invoice is reused on retry
      - the cart is only cleared once an invoice exists
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        catalog_service: CatalogService,
        order_repo: OrderRepository,
        order_service: OrderService,
    ):
        self.cart_repo = cart_repo
        self.catalog_service = catalog_service
        self.order_repo = order_repo
        self.order_service = order_service

    # -------- Checkout --------

    def checkout(
        self,
        session: Session,
        user: User,
        gateway: PaymentGateway,
    ) -> CheckoutResponse:
        """
        Steps:
          1. Load cart lines with products; EmptyCart if none.
          2. total_amount = sum(price * quantity).
          3. Validate every line against current stock.
          4. Reserve stock + create Order and OrderItems in one transaction.
          5. Request the invoice (order id as external reference).
          6. Store the invoice on the order and clear the cart.
        """
        rows = self.cart_repo.list_with_products(session, user.id)
        if not rows:
            raise EmptyCart()

        total_amount = round_money(
            sum(line_total(product.price, item.quantity) for item, product in rows)
        )

        for item, product in rows:
            if item.quantity > product.stock:
                raise _insufficient(product, item.quantity, product.stock)

        order = self._place_order(session, user.id, rows, total_amount)
        logger.info(
            "Order %s created for user %s (total %s, %d lines)",
            order.id,
            user.id,
            total_amount,
            len(rows),
        )

        invoice = self._create_invoice(user, order, gateway)
        self._attach_invoice(session, user.id, order, invoice)

        return CheckoutResponse(
            order_id=order.id,
            invoice_url=invoice.invoice_url,
            total_amount=total_amount,
        )

    def _place_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        rows: list[tuple[CartItem, Product]],
        total_amount: Decimal,
    ) -> Order:
        """
        Reserve stock and persist the order atomically.

        Products are decremented in id order so concurrent transactions
        lock rows in the same sequence.
        """
        lines = sorted(rows, key=lambda row: str(row[1].id))
        try:
            for item, product in lines:
                try:
                    self.catalog_service.decrement_stock(session, product.id, item.quantity)
                except InsufficientStock as e:
                    available = e.extra["available_stock"]
                    error = _insufficient(product, item.quantity, available)
                    session.rollback()
                    logger.warning(
                        "Stock reservation lost for product %s (requested %d, available %d)",
                        product.id,
                        item.quantity,
                        available,
                    )
                    raise error from e
                except NotFound:
                    session.rollback()
                    raise

            order = Order(
                user_id=user_id,
                total_amount=total_amount,
                payment_status=PENDING,
                payment_method=PAYMENT_METHOD,
            )
            order = self.order_repo.create_order(session, order)
            self.order_repo.create_items(
                session,
                [
                    OrderItem(
                        order_id=order.id,
                        product_id=product.id,
                        quantity=item.quantity,
                        price=product.price,
                    )
                    for item, product in rows
                ],
            )
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("Order creation failed for user %s", user_id)
            raise PersistenceError("Failed to create order") from e

        session.refresh(order)
        return order

    def _create_invoice(
        self,
        user: User,
        order: Order,
        gateway: PaymentGateway,
    ) -> InvoiceResult:
        try:
            return gateway.create_invoice(
                external_id=str(order.id),
                amount=order.total_amount,
                payer_email=user.email,
                description=f"Payment for Order #{order.id}",
                success_url=f"{settings.BASE_URL}/orders/{order.id}?payment=success",
                failure_url=f"{settings.BASE_URL}/orders/{order.id}?payment=failed",
            )
        except GatewayError as e:
            logger.error("Invoice creation failed for order %s: %s", order.id, e.message)
            raise GatewayError(
                "Failed to create payment invoice. The order is pending; "
                "retry invoice retrieval instead of checking out again.",
                order_id=str(order.id),
            ) from e

    def _attach_invoice(
        self,
        session: Session,
        user_id: uuid.UUID,
        order: Order,
        invoice: InvoiceResult,
        cart_lines: list[tuple[uuid.UUID, int]] | None = None,
    ) -> None:
        """
        Store invoice id/url on the order and clear the cart, in one commit.

        cart_lines limits the clearing to those (product_id, quantity) lines;
        None clears the whole cart.
        """
        try:
            attached = self.order_repo.attach_invoice(
                session, order.id, invoice.invoice_id, invoice.invoice_url
            )
            if not attached:
                session.rollback()
                logger.warning(
                    "Invoice %s not stored: order %s is no longer pending",
                    invoice.invoice_id,
                    order.id,
                )
                raise ValidationError("Order is no longer pending", order_id=str(order.id))
            if cart_lines is None:
                self.cart_repo.delete_for_user(session, user_id)
            else:
                self.cart_repo.delete_lines(session, user_id, cart_lines)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("Failed to store invoice %s for order %s", invoice.invoice_id, order.id)
            raise PersistenceError(
                "Failed to store payment invoice",
                order_id=str(order.id),
            ) from e
        session.refresh(order)

    # -------- Invoice retry --------

    def retry_invoice(
        self,
        session: Session,
        user: User,
        order_id: uuid.UUID,
        gateway: PaymentGateway,
    ) -> CheckoutResponse:
        """
        Get a payment link for one of the caller's PENDING orders.

        - invoice already stored: fetch it from the gateway
        - gateway already has one for this order (earlier call timed out):
          store and reuse it
        - otherwise create it now

        Attaching clears only the cart lines this order was built from, so
        items added after the failed checkout stay in the cart.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFound("Order not found")
        if order.user_id != user.id:
            raise AccessDenied("Access denied: this order does not belong to you")
        if order.payment_status != PENDING:
            raise ValidationError(f"Order is already {order.payment_status}")

        if order.invoice_id:
            invoice = gateway.get_invoice(order.invoice_id)
        else:
            invoice = gateway.find_invoice(str(order.id))
            if invoice is None:
                invoice = self._create_invoice(user, order, gateway)
            lines = [
                (item.product_id, item.quantity)
                for item in self.order_repo.list_items_for_order(session, order.id)
            ]
            self._attach_invoice(session, user.id, order, invoice, cart_lines=lines)

        return CheckoutResponse(
            order_id=order.id,
            invoice_url=invoice.invoice_url,
            total_amount=order.total_amount,
        )

    # -------- Reconciliation --------

    def expire_stale_orders(
        self,
        session: Session,
        gateway: PaymentGateway,
        older_than_minutes: int | None = None,
    ) -> list[uuid.UUID]:
        """
        Fail PENDING orders whose invoice was never created.

        Each stale order is checked against the gateway first: if an invoice
        exists for it after all, it is attached and the order stays PENDING.
        Otherwise the order becomes FAILED and its stock is released.
        One commit per order.

        Returns:
            ids of the orders that were failed.
        """
        minutes = older_than_minutes if older_than_minutes is not None else settings.STALE_ORDER_MINUTES
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=minutes)

        expired: list[uuid.UUID] = []
        for order in self.order_repo.list_stale_pending(session, cutoff):
            order_id = order.id
            invoice = gateway.find_invoice(str(order_id))
            if invoice is not None:
                self.order_repo.attach_invoice(
                    session, order_id, invoice.invoice_id, invoice.invoice_url
                )
            elif self.order_service.fail_order(session, order):
                expired.append(order_id)
            session.commit()

        if expired:
            logger.info("Expired %d stale pending orders", len(expired))
        return expired
