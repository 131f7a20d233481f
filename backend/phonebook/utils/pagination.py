"""
Page/limit arithmetic for list endpoints.
Pages are 1-indexed; the slice is taken over an already filtered and sorted result.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class Pagination:
    """Pagination window plus the total number of matches."""
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    total: int = 0

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.limit < 1:
            raise ValueError("limit must be >= 1")
        if self.total < 0:
            raise ValueError("total must be >= 0")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def paginate(self, items: Sequence[T]) -> List[T]:
        """
        Slice one page out of a full result sequence.

        Args:
            items: Filtered and sorted results

        Returns:
            Items on this page (empty past the last page)
        """
        return list(items[self.offset:self.offset + self.limit])

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
        }
