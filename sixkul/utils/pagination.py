# sixkul/utils/pagination.py
"""Pagination utilities for consistent API responses."""
from math import ceil
from typing import Any, Dict, List

from fastapi import Query
from pydantic import BaseModel, Field

from ..schemas.base import CamelModel


class PaginationParams(BaseModel):
    """Standard pagination parameters."""
    page: int = Field(1, ge=1, description="Page number (starts from 1)")
    size: int = Field(20, ge=1, le=100, description="Items per page")


class PaginationMeta(CamelModel):
    page: int
    size: int
    total: int
    total_pages: int
    has_next: bool
    has_previous: bool


class Paginator:
    """Pagination utility class."""

    @staticmethod
    def get_pagination_params(
        page: int = Query(1, ge=1, description="Page number"),
        size: int = Query(20, ge=1, le=100, description="Items per page")
    ) -> PaginationParams:
        """FastAPI dependency for pagination parameters."""
        return PaginationParams(page=page, size=size)

    @staticmethod
    def create_meta(page: int, size: int, total: int) -> PaginationMeta:
        total_pages = ceil(total / size) if size > 0 else 0
        return PaginationMeta(
            page=page,
            size=size,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1
        )

    @staticmethod
    def create_response(items: List[Any], page: int, size: int, total: int) -> Dict[str, Any]:
        """``{items, meta}`` with camelCase metadata."""
        meta = Paginator.create_meta(page, size, total)
        return {"items": items, "meta": meta.model_dump(by_alias=True)}
