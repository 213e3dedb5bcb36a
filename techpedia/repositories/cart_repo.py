# techpedia/repositories/cart_repo.py
import uuid

from sqlalchemy import and_, delete, or_
from sqlmodel import Session, col, select

from techpedia.models.cart import CartItem
from techpedia.models.product import Product


class CartRepository:

    def list_with_products(
        self, session: Session, user_id: uuid.UUID
    ) -> list[tuple[CartItem, Product]]:
        """Cart lines joined with their current product rows."""
        stmt = (
            select(CartItem, Product)
            .join(Product, CartItem.product_id == Product.id)
            .where(CartItem.user_id == user_id)
            .order_by(col(CartItem.created_at))
        )
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id, CartItem.product_id == product_id
        )
        return session.exec(stmt).first()

    def get_by_id(self, session: Session, item_id: uuid.UUID) -> CartItem | None:
        return session.get(CartItem, item_id)

    # CRUD
    def create(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(self, session: Session, user_id: uuid.UUID) -> None:
        self.delete_for_user(session, user_id)
        session.commit()

    def delete_for_user(self, session: Session, user_id: uuid.UUID) -> None:
        """Bulk delete without committing (used inside larger transactions)."""
        session.exec(delete(CartItem).where(CartItem.user_id == user_id))

    def delete_for_product(self, session: Session, product_id: uuid.UUID) -> None:
        """Bulk delete without committing."""
        session.exec(delete(CartItem).where(CartItem.product_id == product_id))

    def delete_lines(
        self,
        session: Session,
        user_id: uuid.UUID,
        lines: list[tuple[uuid.UUID, int]],
    ) -> None:
        """
        Delete the user's cart lines matching (product_id, quantity) exactly.
        No commit.
        """
        if not lines:
            return
        session.exec(
            delete(CartItem).where(
                CartItem.user_id == user_id,
                or_(
                    *(
                        and_(CartItem.product_id == product_id, CartItem.quantity == quantity)
                        for product_id, quantity in lines
                    )
                ),
            )
        )
