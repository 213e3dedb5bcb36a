# techpedia/repositories/taxonomy_repo.py
import uuid
from typing import Generic, TypeVar

from sqlmodel import Session, col, select

from techpedia.models.product import Brand, Category

T = TypeVar("T", Brand, Category)


class TaxonomyRepository(Generic[T]):
    """
    Data access layer for the flat lookup tables products point to
    (brands and categories). Both have the same shape: id + unique name.
    """

    def __init__(self, model: type[T]):
        self.model = model

    def get_by_id(self, session: Session, entity_id: uuid.UUID) -> T | None:
        return session.get(self.model, entity_id)

    def get_by_name(self, session: Session, name: str) -> T | None:
        stmt = select(self.model).where(self.model.name == name)
        return session.exec(stmt).first()

    def list_all(self, session: Session) -> list[T]:
        stmt = select(self.model).order_by(col(self.model.created_at).desc())
        return list(session.exec(stmt).all())

    def create(self, session: Session, entity: T) -> T:
        session.add(entity)
        session.commit()
        session.refresh(entity)
        return entity

    def update(self, session: Session, entity: T) -> T:
        session.add(entity)
        session.commit()
        session.refresh(entity)
        return entity

    def delete(self, session: Session, entity: T) -> None:
        session.delete(entity)
        session.commit()


class BrandRepository(TaxonomyRepository[Brand]):
    def __init__(self):
        super().__init__(Brand)


class CategoryRepository(TaxonomyRepository[Category]):
    def __init__(self):
        super().__init__(Category)
