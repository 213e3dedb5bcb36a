from sqlmodel import Session, select

import pytest

from techpedia.core.errors import InsufficientStock
from techpedia.models.order import Order
from techpedia.models.user import User
from techpedia.repositories.cart_repo import CartRepository
from techpedia.repositories.order_repo import OrderRepository
from techpedia.repositories.product_repo import ProductRepository
from techpedia.repositories.taxonomy_repo import BrandRepository, CategoryRepository
from techpedia.services.catalog_service import CatalogService
from techpedia.services.checkout_service import CheckoutService
from techpedia.services.order_service import OrderService


class InterleavingProductRepository(ProductRepository):
    """Runs `before_first_decrement` right before the first stock update."""

    def __init__(self, before_first_decrement):
        self.before_first_decrement = before_first_decrement
        self.fired = False

    def decrement_stock(self, session, product_id, amount):
        if not self.fired:
            self.fired = True
            self.before_first_decrement()
        return super().decrement_stock(session, product_id, amount)


def build_service(product_repo):
    order_repo = OrderRepository()
    cart_repo = CartRepository()
    return CheckoutService(
        cart_repo,
        CatalogService(product_repo, BrandRepository(), CategoryRepository(), cart_repo),
        order_repo,
        OrderService(order_repo, product_repo),
    )


class TestConcurrentCheckout:
    def test_last_unit_is_sold_once(
        self, engine, session, gateway, customer, other_customer, make_product, put_in_cart
    ):
        product = make_product(stock=1)
        put_in_cart(customer, product, 1)
        put_in_cart(other_customer, product, 1)

        def competing_checkout():
            # Bob completes checkout after Alice validated stock but before
            # she reserves it.
            with Session(engine) as other:
                bob = other.get(User, other_customer.id)
                build_service(ProductRepository()).checkout(other, bob, gateway)

        service = build_service(InterleavingProductRepository(competing_checkout))

        with Session(engine) as own:
            alice = own.get(User, customer.id)
            with pytest.raises(InsufficientStock) as excinfo:
                service.checkout(own, alice, gateway)

        assert excinfo.value.extra["available_stock"] == 0
        orders = session.exec(select(Order)).all()
        assert [o.user_id for o in orders] == [other_customer.id]
        session.refresh(product)
        assert product.stock == 0

    def test_sequential_checkouts_cannot_oversell(
        self, session, gateway, customer, other_customer, make_product, put_in_cart
    ):
        product = make_product(stock=3)
        put_in_cart(customer, product, 2)
        put_in_cart(other_customer, product, 2)
        service = build_service(ProductRepository())

        service.checkout(session, customer, gateway)
        with pytest.raises(InsufficientStock):
            service.checkout(session, other_customer, gateway)

        session.refresh(product)
        assert product.stock == 1
        assert len(session.exec(select(Order)).all()) == 1
