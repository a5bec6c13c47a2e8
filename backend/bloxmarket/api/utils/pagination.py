"""
Offset pagination for list endpoints.

Every list endpoint answers `{<items>: [...], pagination: {page, limit,
total, pages}}`.
"""
from dataclasses import dataclass
from math import ceil
from typing import Annotated

from fastapi import Depends, Query

from bloxmarket.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from bloxmarket.schemas.common import PaginationMeta


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> PaginationMeta:
        return PaginationMeta(
            page=self.page,
            limit=self.limit,
            total=total,
            pages=ceil(total / self.limit) if total else 0,
        )


def page_params(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
) -> PageParams:
    return PageParams(page=page, limit=limit)


Pagination = Annotated[PageParams, Depends(page_params)]
