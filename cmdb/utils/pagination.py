"""
Pagination utilities for API responses
Provides consistent pagination across all list endpoints
"""
from typing import TypeVar, Generic, List, Optional
from pydantic import BaseModel, Field
from math import ceil

from .config import ConfigDefaults

T = TypeVar('T')


class PaginationParams(BaseModel):
    """Pagination query parameters"""
    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(
        default=ConfigDefaults.PAGE_SIZE_DEFAULT,
        ge=1,
        le=ConfigDefaults.PAGE_SIZE_MAX,
        description="Items per page"
    )

    @property
    def offset(self) -> int:
        """Calculate offset for database queries"""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit for database queries"""
        return self.page_size


class PageInfo(BaseModel):
    """Pagination metadata"""
    page: int = Field(description="Current page number")
    page_size: int = Field(description="Items per page")
    total_items: int = Field(description="Total number of items")
    total_pages: int = Field(description="Total number of pages")
    has_next: bool = Field(description="Whether there is a next page")
    has_prev: bool = Field(description="Whether there is a previous page")
    next_page: Optional[int] = Field(default=None, description="Next page number")
    prev_page: Optional[int] = Field(default=None, description="Previous page number")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response"""
    items: List[T] = Field(description="List of items for current page")
    pagination: PageInfo = Field(description="Pagination metadata")

    @classmethod
    def create(
        cls,
        items: List[T],
        total_items: int,
        page: int = 1,
        page_size: int = ConfigDefaults.PAGE_SIZE_DEFAULT
    ) -> "PaginatedResponse[T]":
        """
        Create a paginated response

        Args:
            items: List of items for current page
            total_items: Total number of items across all pages
            page: Current page number (1-indexed)
            page_size: Number of items per page
        """
        total_pages = ceil(total_items / page_size) if page_size > 0 else 0
        has_next = page < total_pages
        has_prev = page > 1

        pagination = PageInfo(
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=has_next,
            has_prev=has_prev,
            next_page=page + 1 if has_next else None,
            prev_page=page - 1 if has_prev else None
        )

        return cls(items=items, pagination=pagination)
