"""
Assembles a search request from an arbitrary subset of optional filters.

Every filter is a pure function SearchFilters -> Optional[Node]. build_query
evaluates them in a fixed order, drops the ones that produced nothing and
wraps the rest in a single top-level ALL group. An omitted filter never
constrains the result.
"""
from typing import Callable, Optional, Tuple

from models.criteria import (
    BooleanGroup, ExactMatch, Mode, Node, RangeMatch, SearchQuery, SortDirection,
    SortKey, TextMatch, any_of, keyword_field,
)
from models.search import SearchFilters

# Fields searched by the free-text query, with their relevance boost
TEXT_QUERY_FIELDS = (
    ("name", 2.0),
    ("description", None),
    ("category", None),
    ("brand", None),
)

# sortBy value -> field sorted on. name uses the untokenized form for a stable lexical order.
SORT_FIELDS = {
    "price": "price",
    "rating": "rating",
    "created": "createdAt",
    "name": keyword_field("name"),
}

Filter = Callable[[SearchFilters], Optional[Node]]


def active_filter(filters: SearchFilters) -> Node:
    # Inactive products are treated as deleted/unpublished
    return ExactMatch(field="active", value=True)


def text_filter(filters: SearchFilters) -> Optional[Node]:
    query = (filters.query or "").strip()
    if not query:
        return None
    return any_of(
        *(TextMatch(field=field, value=query, boost=boost) for field, boost in TEXT_QUERY_FIELDS),
        minimum_match=1,
    )


def category_filter(filters: SearchFilters) -> Optional[Node]:
    if not filters.category:
        return None
    return ExactMatch(field=keyword_field("category"), value=filters.category)


def brand_filter(filters: SearchFilters) -> Optional[Node]:
    if not filters.brand:
        return None
    return ExactMatch(field=keyword_field("brand"), value=filters.brand)


def price_filter(filters: SearchFilters) -> Optional[Node]:
    # One node for both bounds, never two one-sided ranges
    if filters.minPrice is None and filters.maxPrice is None:
        return None
    return RangeMatch(field="price", min=filters.minPrice, max=filters.maxPrice)


def rating_filter(filters: SearchFilters) -> Optional[Node]:
    if filters.minRating is None:
        return None
    return RangeMatch(field="rating", min=filters.minRating)


def in_stock_filter(filters: SearchFilters) -> Optional[Node]:
    if not filters.inStockOnly:
        return None
    return RangeMatch(field="stockQuantity", min=0, exclusive_min=True)


FILTERS: Tuple[Filter, ...] = (
    active_filter,
    text_filter,
    category_filter,
    brand_filter,
    price_filter,
    rating_filter,
    in_stock_filter,
)


def build_criteria(filters: SearchFilters) -> BooleanGroup:
    nodes = tuple(node for node in (f(filters) for f in FILTERS) if node is not None)
    return BooleanGroup(mode=Mode.ALL, children=nodes)


def parse_direction(value: Optional[str]) -> SortDirection:
    if value and value.strip().lower() == SortDirection.ASC.value:
        return SortDirection.ASC
    return SortDirection.DESC


def resolve_sort(sort_by: Optional[str], sort_direction: Optional[str] = "desc") -> Tuple[SortKey, ...]:
    """
    Sort keys for a sortBy/sortDirection pair.
    Missing or unknown sortBy falls back to relevance, always descending.
    """
    field = SORT_FIELDS.get((sort_by or "").strip().lower())
    if field is None:
        return (SortKey.relevance(),)
    return (SortKey(field=field, direction=parse_direction(sort_direction)),)


def build_query(filters: Optional[SearchFilters] = None, **params) -> SearchQuery:
    """
    Build the criteria tree and sort keys for a set of filters.

    Accepts either a SearchFilters instance or its fields as keyword
    arguments. Total over its input: any combination of missing values
    is valid.
    """
    if filters is None:
        filters = SearchFilters(**params)
    return SearchQuery(
        criteria=build_criteria(filters),
        sort=resolve_sort(filters.sortBy, filters.sortDirection),
    )
