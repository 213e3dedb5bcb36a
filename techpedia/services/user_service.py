# techpedia/services/user_service.py
from sqlmodel import Session

from techpedia.core.errors import ValidationError
from techpedia.models.user import ADMIN, CUSTOMER
from techpedia.repositories.user_repo import UserRepository
from techpedia.schemas.common import build_meta
from techpedia.schemas.user import UserPage, UserRead

ROLES = {CUSTOMER, ADMIN}


class UserService:
    """
    Admin-side user administration.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def list_users(
        self,
        session: Session,
        page: int = 1,
        limit: int = 10,
        role: str | None = None,
        search: str | None = None,
    ) -> UserPage:
        """
        Paginated listing with optional role filter and name/email search.
        """
        if role and role not in ROLES:
            raise ValidationError(f"Unknown role: {role}")

        users, total = self.repo.list_filtered(
            session,
            role=role,
            search=search,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return UserPage(
            data=[UserRead.model_validate(u) for u in users],
            meta=build_meta(total, page, limit),
        )
