# techpedia/repositories/user_repo.py
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from techpedia.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Basic CRUD -----

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def list_filtered(
        self,
        session: Session,
        *,
        role: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[User], int]:
        """
        Paginated user listing, newest first.

        Args:
            role: only users with this role
            search: case-insensitive match on name or email
            skip: offset rows (for paging)
            limit: max number of rows returned

        Returns:
            (users on this page, total matching users)
        """
        conditions = []
        if role:
            conditions.append(User.role == role)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(col(User.name).ilike(pattern), col(User.email).ilike(pattern))
            )

        total = session.exec(
            select(func.count()).select_from(User).where(*conditions)
        ).one()
        stmt = (
            select(User)
            .where(*conditions)
            .order_by(col(User.created_at).desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all()), total

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
