# techpedia/repositories/token_repo.py
import uuid
from datetime import datetime

from sqlalchemy import delete
from sqlmodel import Session, select

from techpedia.models.user import InvalidToken


class TokenRepository:
    """
    Revocation store: token -> expiry.

    Entries past their expiry are treated as absent (lazy expiry) and are
    removed by `sweep_expired`.
    """

    def is_revoked(self, session: Session, token: str, now: datetime) -> bool:
        stmt = select(InvalidToken).where(
            InvalidToken.token == token,
            InvalidToken.expires_at > now,
        )
        return session.exec(stmt).first() is not None

    def get(self, session: Session, token: str) -> InvalidToken | None:
        stmt = select(InvalidToken).where(InvalidToken.token == token)
        return session.exec(stmt).first()

    def revoke(
        self,
        session: Session,
        token: str,
        user_id: uuid.UUID,
        expires_at: datetime,
    ) -> InvalidToken:
        entry = InvalidToken(token=token, user_id=user_id, expires_at=expires_at)
        session.add(entry)
        session.commit()
        session.refresh(entry)
        return entry

    def sweep_expired(self, session: Session, now: datetime) -> int:
        """Delete expired entries; returns how many rows were removed."""
        result = session.exec(delete(InvalidToken).where(InvalidToken.expires_at <= now))
        session.commit()
        return result.rowcount
