# techpedia/repositories/product_repo.py
import uuid

from sqlalchemy import func, or_, update
from sqlmodel import Session, col, select

from techpedia.models.order import OrderItem
from techpedia.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    - Stock adjustments do not commit; they run inside the caller's
      transaction.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def list_filtered(
        self,
        session: Session,
        *,
        brand_id: uuid.UUID | None = None,
        category_id: uuid.UUID | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Product], int]:
        """
        Filtered, paginated listing (newest first).

        Returns:
            (rows for this page, total matching rows)
        """
        conditions = []
        if brand_id:
            conditions.append(Product.brand_id == brand_id)
        if category_id:
            conditions.append(Product.category_id == category_id)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    col(Product.name).ilike(pattern),
                    col(Product.description).ilike(pattern),
                )
            )

        count_stmt = select(func.count()).select_from(Product).where(*conditions)
        total = session.exec(count_stmt).one()

        stmt = (
            select(Product)
            .where(*conditions)
            .order_by(col(Product.created_at).desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all()), total

    def list_by_brand(self, session: Session, brand_id: uuid.UUID) -> list[Product]:
        stmt = select(Product).where(Product.brand_id == brand_id)
        return list(session.exec(stmt).all())

    def list_by_category(self, session: Session, category_id: uuid.UUID) -> list[Product]:
        stmt = select(Product).where(Product.category_id == category_id)
        return list(session.exec(stmt).all())

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()

    def count_order_items(self, session: Session, product_id: uuid.UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(OrderItem)
            .where(OrderItem.product_id == product_id)
        )
        return session.exec(stmt).one()

    # ----- Stock -----

    def decrement_stock(
        self,
        session: Session,
        product_id: uuid.UUID,
        amount: int,
    ) -> bool:
        """
        Atomic conditional decrement:

            UPDATE products SET stock = stock - :amount
            WHERE id = :id AND stock >= :amount

        Returns False when no row matched (stock would go negative or the
        product vanished). No commit.
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock >= amount)
            .values(stock=Product.stock - amount)
        )
        result = session.exec(stmt)
        return result.rowcount == 1

    def increment_stock(
        self,
        session: Session,
        product_id: uuid.UUID,
        amount: int,
    ) -> None:
        """Return reserved units to stock. No commit."""
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + amount)
        )
        session.exec(stmt)
