"""
Shared API schemas.
"""
import math
from pydantic import BaseModel


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total_items: int
    total_pages: int

    @classmethod
    def from_counts(cls, page: int, limit: int, total_items: int) -> "PaginationMeta":
        total_pages = 0 if total_items == 0 else math.ceil(total_items / limit)
        return cls(page=page, limit=limit, total_items=total_items, total_pages=total_pages)


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx API response."""
    error: ErrorDetail


class MessageResponse(BaseModel):
    message: str
