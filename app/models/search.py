from decimal import Decimal
from typing import Any, Dict, Generic, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, computed_field, model_validator

from utils.errors import InvalidPageSize

T = TypeVar("T")


class SearchFilters(BaseModel):
    """
    Optional filter parameters of an advanced search.
    Any field left as None contributes no constraint.
    """
    query: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    minPrice: Optional[Decimal] = None
    maxPrice: Optional[Decimal] = None
    minRating: Optional[float] = None
    inStockOnly: Optional[bool] = None
    # price, rating, name, created or relevance; anything else sorts by relevance
    sortBy: Optional[str] = None
    sortDirection: Optional[str] = "desc"

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "query": "iPhon",
                "minPrice": 500,
                "maxPrice": 1200,
                "inStockOnly": True,
                "sortBy": "price",
                "sortDirection": "asc"
            }
        }
    )


def require_page_size(size: int) -> None:
    """Precondition for paging: at least one element per page"""
    if size < 1:
        raise InvalidPageSize(size)


class ResultPage(BaseModel, Generic[T]):
    """
    One page of search results.

    totalPages is derived from totalElements and size. totalElements is
    what the backend reports; Atlas Search counts with a lower bound, so
    for very large result sets it may undercount. Pages are frozen and
    so are the Product items they hold.
    """
    model_config = ConfigDict(frozen=True)

    content: Tuple[T, ...] = ()
    totalElements: int = 0
    currentPage: int = 0
    size: int = 1
    searchTimeMs: int = 0
    aggregations: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def check_page(self) -> "ResultPage[T]":
        # InvalidPageSize is not a ValueError, so pydantic lets it through unwrapped
        require_page_size(self.size)
        if len(self.content) > self.size:
            raise ValueError(f"Page holds {len(self.content)} elements but size is {self.size}")
        return self

    @computed_field
    @property
    def totalPages(self) -> int:
        return -(-self.totalElements // self.size)

    @classmethod
    def build(
        cls,
        content: Sequence[T],
        total_elements: int,
        current_page: int,
        size: int,
        search_time_ms: int = 0,
    ) -> "ResultPage[T]":
        return cls(
            content=tuple(content),
            totalElements=total_elements,
            currentPage=current_page,
            size=size,
            searchTimeMs=search_time_ms,
        )
