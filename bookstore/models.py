# bookstore/models.py
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    prev_page: Optional[int] = None
    next_page: Optional[int] = None

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PageMeta":
        total_pages = (total + limit - 1) // limit
        return cls(
            page=page,
            limit=limit,
            total=total,
            totalPages=total_pages,
            prev_page=page - 1 if page > 1 else None,
            next_page=page + 1 if page < total_pages else None,
        )


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


class PaginatedResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: List[T]
    meta: PageMeta


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
    item_id: Optional[str] = None
    details: Optional[Any] = None
