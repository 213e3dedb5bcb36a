# techpedia/routers/categories.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from techpedia.core.auth import require_admin
from techpedia.database import get_session
from techpedia.routers.dependencies import catalog_service
from techpedia.schemas.common import MessageResponse
from techpedia.schemas.product import CategoryRead, CategoryWithProducts, NamedCreate

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=list[CategoryRead])
def list_categories(session: Session = Depends(get_session)):
    return catalog_service.list_categories(session)


@router.get("/{category_id}", response_model=CategoryWithProducts)
def get_category(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a category with its products.
    """
    return catalog_service.get_category(session, category_id)


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_category(
    payload: NamedCreate,
    session: Session = Depends(get_session),
):
    return catalog_service.create_category(session, payload)


@router.put(
    "/{category_id}",
    response_model=CategoryRead,
    dependencies=[Depends(require_admin)],
)
def update_category(
    category_id: uuid.UUID,
    payload: NamedCreate,
    session: Session = Depends(get_session),
):
    return catalog_service.update_category(session, category_id, payload)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_category(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a category (admin only). Refused while products use it.
    """
    catalog_service.delete_category(session, category_id)
    return MessageResponse(message="Category deleted successfully")
