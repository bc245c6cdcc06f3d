"""Pagination helpers for list endpoints"""

import math
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from .exceptions import ValidationError

T = TypeVar("T")

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def build(
        cls, page: Optional[int] = None, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> "PageRequest":
        """Resolve page/limit/offset query params into a page request.

        ``page`` wins over ``offset``; an offset is rounded down to the page
        that contains it.
        """
        limit = limit or DEFAULT_LIMIT
        if limit < 1 or limit > MAX_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}")
        if page is not None:
            if page < 1:
                raise ValidationError("page must be 1 or greater")
            return cls(page=page, limit=limit)
        if offset is not None:
            if offset < 0:
                raise ValidationError("offset must be 0 or greater")
            return cls(page=offset // limit + 1, limit=limit)
        return cls(page=1, limit=limit)


@dataclass
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    def meta(self) -> dict:
        return {
            "currentPage": self.page,
            "itemsPerPage": self.limit,
            "totalItems": self.total,
            "totalPages": self.total_pages,
            "hasPreviousPage": self.has_previous_page,
            "hasNextPage": self.has_next_page,
        }
