# techpedia/routers/brands.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from techpedia.core.auth import require_admin
from techpedia.database import get_session
from techpedia.routers.dependencies import catalog_service
from techpedia.schemas.common import MessageResponse
from techpedia.schemas.product import BrandRead, BrandWithProducts, NamedCreate

router = APIRouter(prefix="/brands", tags=["Brands"])


@router.get("", response_model=list[BrandRead])
def list_brands(session: Session = Depends(get_session)):
    return catalog_service.list_brands(session)


@router.get("/{brand_id}", response_model=BrandWithProducts)
def get_brand(
    brand_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a brand with its products.
    """
    return catalog_service.get_brand(session, brand_id)


@router.post(
    "",
    response_model=BrandRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_brand(
    payload: NamedCreate,
    session: Session = Depends(get_session),
):
    return catalog_service.create_brand(session, payload)


@router.put(
    "/{brand_id}",
    response_model=BrandRead,
    dependencies=[Depends(require_admin)],
)
def update_brand(
    brand_id: uuid.UUID,
    payload: NamedCreate,
    session: Session = Depends(get_session),
):
    return catalog_service.update_brand(session, brand_id, payload)


@router.delete(
    "/{brand_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_brand(
    brand_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a brand (admin only). Refused while products use it.
    """
    catalog_service.delete_brand(session, brand_id)
    return MessageResponse(message="Brand deleted successfully")
