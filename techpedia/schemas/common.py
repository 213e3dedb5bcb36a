# techpedia/schemas/common.py
from sqlmodel import SQLModel


class PaginationMeta(SQLModel):
    total: int
    page: int
    limit: int
    total_pages: int


class MessageResponse(SQLModel):
    message: str


def build_meta(total: int, page: int, limit: int) -> PaginationMeta:
    """Page numbers are 1-based; total_pages is ceil(total / limit)."""
    return PaginationMeta(
        total=total,
        page=page,
        limit=limit,
        total_pages=(total + limit - 1) // limit,
    )
