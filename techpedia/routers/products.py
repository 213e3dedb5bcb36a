# techpedia/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from techpedia.core.auth import require_admin
from techpedia.database import get_session
from techpedia.routers.dependencies import (
    catalog_service,
    product_create_input,
    product_update_input,
)
from techpedia.schemas.common import MessageResponse
from techpedia.schemas.product import (
    ProductCreate,
    ProductDetail,
    ProductPage,
    ProductUpdate,
)

router = APIRouter(prefix="/products", tags=["Products"])


# -------- Public endpoints --------


@router.get("", response_model=ProductPage)
def list_products(
    session: Session = Depends(get_session),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    brand_id: uuid.UUID | None = None,
    category_id: uuid.UUID | None = None,
    search: str | None = None,
):
    """
    List products, newest first.

    - Public endpoint.
    - Filter by brand, category, or a search term over name/description.
    """
    return catalog_service.list_products(
        session,
        page=page,
        limit=limit,
        brand_id=brand_id,
        category_id=category_id,
        search=search,
    )


@router.get("/{product_id}", response_model=ProductDetail)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single product with its brand and category.
    """
    return catalog_service.get_product_detail(session, product_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductDetail,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate = Depends(product_create_input),
    session: Session = Depends(get_session),
):
    """
    Create a new product (admin only).

    Accepts JSON or form-data with the same fields.
    """
    return catalog_service.create_product(session, payload)


@router.put(
    "/{product_id}",
    response_model=ProductDetail,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate = Depends(product_update_input),
    session: Session = Depends(get_session),
):
    """
    Update an existing product (admin only).

    Accepts JSON or form-data with the same fields.
    """
    return catalog_service.update_product(session, product_id, payload)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a product (admin only). Refused while orders reference it.
    """
    catalog_service.delete_product(session, product_id)
    return MessageResponse(message="Product deleted successfully")
