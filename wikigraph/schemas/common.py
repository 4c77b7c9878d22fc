"""Schemas shared by several routers: pagination, errors, article references."""

from math import ceil
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a list endpoint."""

    items: list[T]
    total: int = Field(ge=0, description="Items across all pages")
    page: int = Field(ge=1, description="1-based page number")
    page_size: int = Field(ge=1, description="Items per page")
    pages: int = Field(ge=0, description="Number of pages (0 when empty)")

    @classmethod
    def create(cls, items: list[T], total: int, page: int, page_size: int) -> "PaginatedResponse[T]":
        return cls(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            pages=ceil(total / page_size),
        )


class ErrorResponse(BaseModel):
    """Body of every engine error response (404, 400, 409, 503)."""

    error: str = Field(description="Error kind", examples=["not_found"])
    message: str = Field(examples=["Article 0190a3c2-... not found"])


class ArticleRef(BaseModel):
    """Minimal article reference used inside link payloads."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    slug: str
