"""Pagination schemas for page-number pagination."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """Position of a page within the full filtered result set.

    ``total_items`` and the page contents come from two separate queries, so
    under concurrent writes they can disagree slightly.
    """

    current_page: int = Field(ge=1)
    per_page: int = Field(ge=1)
    total_pages: int = Field(ge=0)
    total_items: int = Field(ge=0)
    items_on_page: int = Field(ge=0)


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic page of results with its pagination envelope."""

    data: list[T]
    pagination: PaginationMeta
