# techpedia/routers/users.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from techpedia.core.auth import require_admin
from techpedia.database import get_session
from techpedia.routers.dependencies import user_service
from techpedia.schemas.user import UserPage

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=UserPage,
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    role: str | None = None,
    search: str | None = None,
):
    """
    List all users (admin only).

    Pagination via page/limit; optional `role` filter and `search`
    over name and email.
    """
    return user_service.list_users(session, page, limit, role, search)
