# techpedia/services/catalog_service.py
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from techpedia.core.errors import InsufficientStock, NotFound, PersistenceError, ValidationError
from techpedia.models.product import Brand, Category, Product
from techpedia.repositories.cart_repo import CartRepository
from techpedia.repositories.product_repo import ProductRepository
from techpedia.repositories.taxonomy_repo import (
    BrandRepository,
    CategoryRepository,
    TaxonomyRepository,
)
from techpedia.schemas.common import build_meta
from techpedia.schemas.product import (
    BrandRead,
    BrandWithProducts,
    CategoryRead,
    CategoryWithProducts,
    NamedCreate,
    ProductCreate,
    ProductDetail,
    ProductPage,
    ProductRead,
    ProductUpdate,
)

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Business logic for products, brands and categories.

    Responsibilities:
      - filtered, paginated product listing
      - referential checks (brand / category must exist)
      - guarded deletes (no product with orders, no brand/category in use)
      - the stock interface used by checkout
    """

    def __init__(
        self,
        product_repo: ProductRepository,
        brand_repo: BrandRepository,
        category_repo: CategoryRepository,
        cart_repo: CartRepository,
    ):
        self.product_repo = product_repo
        self.brand_repo = brand_repo
        self.category_repo = category_repo
        self.cart_repo = cart_repo

    # ----- Helpers -----

    def _detail(self, session: Session, product: Product) -> ProductDetail:
        brand = self.brand_repo.get_by_id(session, product.brand_id)
        category = self.category_repo.get_by_id(session, product.category_id)
        return ProductDetail(
            **ProductRead.model_validate(product).model_dump(),
            brand=BrandRead.model_validate(brand) if brand else None,
            category=CategoryRead.model_validate(category) if category else None,
        )

    def _check_references(
        self,
        session: Session,
        brand_id: uuid.UUID | None,
        category_id: uuid.UUID | None,
    ) -> None:
        if brand_id and not self.brand_repo.get_by_id(session, brand_id):
            raise ValidationError("Invalid brand ID")
        if category_id and not self.category_repo.get_by_id(session, category_id):
            raise ValidationError("Invalid category ID")

    # ----- Products -----

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise NotFound("Product not found")
        return product

    def get_product_detail(self, session: Session, product_id: uuid.UUID) -> ProductDetail:
        return self._detail(session, self.get_product(session, product_id))

    def list_products(
        self,
        session: Session,
        page: int = 1,
        limit: int = 10,
        brand_id: uuid.UUID | None = None,
        category_id: uuid.UUID | None = None,
        search: str | None = None,
    ) -> ProductPage:
        products, total = self.product_repo.list_filtered(
            session,
            brand_id=brand_id,
            category_id=category_id,
            search=search,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return ProductPage(
            data=[self._detail(session, p) for p in products],
            meta=build_meta(total, page, limit),
        )

    def create_product(self, session: Session, payload: ProductCreate) -> ProductDetail:
        self._check_references(session, payload.brand_id, payload.category_id)
        product = self.product_repo.create(session, Product(**payload.model_dump()))
        logger.info("Product %s created", product.id)
        return self._detail(session, product)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> ProductDetail:
        """
        Partial update. `stock` is set directly (admin correction);
        `remove_image` clears image_url unless a new one is given.
        """
        product = self.get_product(session, product_id)
        self._check_references(session, payload.brand_id, payload.category_id)

        data = payload.model_dump(exclude_unset=True, exclude={"remove_image"})
        for key, value in data.items():
            if value is None:
                continue
            setattr(product, key, value)
        if payload.remove_image and payload.image_url is None:
            product.image_url = None
        product.updated_at = datetime.now(timezone.utc)

        product = self.product_repo.update(session, product)
        return self._detail(session, product)

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Delete a product and the cart lines pointing to it.

        Raises:
            ValidationError: if any order references the product.
        """
        product = self.get_product(session, product_id)

        order_count = self.product_repo.count_order_items(session, product_id)
        if order_count:
            raise ValidationError(
                "Cannot delete product with existing orders",
                order_count=order_count,
            )

        try:
            self.cart_repo.delete_for_product(session, product_id)
            self.product_repo.delete(session, product)
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError("Database error during product deletion") from e
        logger.info("Product %s deleted", product_id)

    def decrement_stock(self, session: Session, product_id: uuid.UUID, amount: int) -> None:
        """
        Take `amount` units if available, inside the caller's transaction.

        Raises:
            NotFound: unknown product.
            InsufficientStock: fewer than `amount` units left.
        """
        product = self.get_product(session, product_id)
        if not self.product_repo.decrement_stock(session, product_id, amount):
            session.refresh(product)
            raise InsufficientStock(
                "Insufficient stock",
                product_id=str(product_id),
                available_stock=product.stock,
                requested_quantity=amount,
            )

    # ----- Brands / categories -----

    def _taxonomy_get(self, session: Session, repo: TaxonomyRepository, entity_id: uuid.UUID, label: str):
        entity = repo.get_by_id(session, entity_id)
        if not entity:
            raise NotFound(f"{label} not found")
        return entity

    def _taxonomy_save(self, session: Session, repo: TaxonomyRepository, entity, name: str, label: str):
        existing = repo.get_by_name(session, name)
        if existing and existing.id != entity.id:
            raise ValidationError(f"{label} name already exists")
        entity.name = name
        entity.updated_at = datetime.now(timezone.utc)
        return repo.update(session, entity)

    def list_brands(self, session: Session) -> list[Brand]:
        return self.brand_repo.list_all(session)

    def get_brand(self, session: Session, brand_id: uuid.UUID) -> BrandWithProducts:
        brand = self._taxonomy_get(session, self.brand_repo, brand_id, "Brand")
        products = self.product_repo.list_by_brand(session, brand_id)
        return BrandWithProducts(
            **BrandRead.model_validate(brand).model_dump(),
            products=[ProductRead.model_validate(p) for p in products],
        )

    def create_brand(self, session: Session, payload: NamedCreate) -> Brand:
        return self._taxonomy_save(session, self.brand_repo, Brand(name=payload.name), payload.name, "Brand")

    def update_brand(self, session: Session, brand_id: uuid.UUID, payload: NamedCreate) -> Brand:
        brand = self._taxonomy_get(session, self.brand_repo, brand_id, "Brand")
        return self._taxonomy_save(session, self.brand_repo, brand, payload.name, "Brand")

    def delete_brand(self, session: Session, brand_id: uuid.UUID) -> None:
        brand = self._taxonomy_get(session, self.brand_repo, brand_id, "Brand")
        if self.product_repo.list_by_brand(session, brand_id):
            raise ValidationError("Brand has products")
        self.brand_repo.delete(session, brand)

    def list_categories(self, session: Session) -> list[Category]:
        return self.category_repo.list_all(session)

    def get_category(self, session: Session, category_id: uuid.UUID) -> CategoryWithProducts:
        category = self._taxonomy_get(session, self.category_repo, category_id, "Category")
        products = self.product_repo.list_by_category(session, category_id)
        return CategoryWithProducts(
            **CategoryRead.model_validate(category).model_dump(),
            products=[ProductRead.model_validate(p) for p in products],
        )

    def create_category(self, session: Session, payload: NamedCreate) -> Category:
        return self._taxonomy_save(
            session, self.category_repo, Category(name=payload.name), payload.name, "Category"
        )

    def update_category(
        self, session: Session, category_id: uuid.UUID, payload: NamedCreate
    ) -> Category:
        category = self._taxonomy_get(session, self.category_repo, category_id, "Category")
        return self._taxonomy_save(session, self.category_repo, category, payload.name, "Category")

    def delete_category(self, session: Session, category_id: uuid.UUID) -> None:
        category = self._taxonomy_get(session, self.category_repo, category_id, "Category")
        if self.product_repo.list_by_category(session, category_id):
            raise ValidationError("Category has products")
        self.category_repo.delete(session, category)
