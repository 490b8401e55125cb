"""
Pagination and sorting schemas
Turns untrusted paging/sorting input into a bounded query configuration
"""
import math
from typing import List

from pydantic import BaseModel, Field

from app.utils.validator import Validator, permitted_value


MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100


# ============================================
# Filters
# ============================================

class Filters(BaseModel):
    """
    Client-supplied paging and sorting parameters

    `sort` is a column token, optionally prefixed with "-" for descending
    order. It is only ever turned into SQL through `sort_safelist`.
    """
    page: int = Field(default=1, description="1-based page number")
    page_size: int = Field(default=20, description="Records per page")
    sort: str = Field(default="id", description="Sort token, '-' prefix for descending")
    sort_safelist: List[str] = Field(default_factory=list, description="Accepted sort tokens")

    def sort_column(self) -> str:
        """
        Bare column name for the sort token.

        Raises:
            RuntimeError: If the token is not in the safe-list. Callers are
                expected to run `validate_filters` first.
        """
        for safe_value in self.sort_safelist:
            if self.sort == safe_value:
                return self.sort.removeprefix("-")
        raise RuntimeError(f"unsafe sort parameter: {self.sort!r}")

    def sort_direction(self) -> str:
        if self.sort.startswith("-"):
            return "DESC"
        return "ASC"

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def validate_filters(v: Validator, filters: Filters) -> None:
    """Record every paging/sorting violation on `v`"""
    v.check(filters.page > 0, "page", "must be greater than zero")
    v.check(filters.page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(filters.page_size > 0, "page_size", "must be greater than zero")
    v.check(filters.page_size <= MAX_PAGE_SIZE, "page_size", "must be a maximum of 100")

    v.check(permitted_value(filters.sort, *filters.sort_safelist), "sort", "invalid sort value")


# ============================================
# Metadata
# ============================================

class Metadata(BaseModel):
    """Pagination summary returned alongside a page of results"""
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records == 0:
        return Metadata()

    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )
