"""
Hand-written table of the catalog's fixed lookups.

Each entry maps a logical operation name to the criteria tree it runs.
All of them sort by relevance; paging is applied by the caller.
"""
from decimal import Decimal
from typing import Callable, Dict

from models.criteria import (
    ExactMatch, RangeMatch, SearchQuery, TextMatch, all_of, any_of, keyword_field,
)


def _query(criteria) -> SearchQuery:
    return SearchQuery(criteria=criteria)


def by_category(category: str) -> SearchQuery:
    return _query(all_of(ExactMatch(field=keyword_field("category"), value=category)))


def by_brand(brand: str) -> SearchQuery:
    return _query(all_of(ExactMatch(field=keyword_field("brand"), value=brand)))


def active() -> SearchQuery:
    return _query(all_of(ExactMatch(field="active", value=True)))


def featured() -> SearchQuery:
    return _query(all_of(ExactMatch(field="featured", value=True)))


def price_between(min_price: Decimal, max_price: Decimal) -> SearchQuery:
    return _query(all_of(RangeMatch(field="price", min=min_price, max=max_price)))


def name_or_description(term: str) -> SearchQuery:
    return _query(any_of(
        TextMatch(field="name", value=term),
        TextMatch(field="description", value=term),
    ))


def category_and_price_range(category: str, min_price: Decimal, max_price: Decimal) -> SearchQuery:
    return _query(all_of(
        ExactMatch(field=keyword_field("category"), value=category),
        RangeMatch(field="price", min=min_price, max=max_price),
    ))


def tags(*values: str) -> SearchQuery:
    return _query(any_of(*(ExactMatch(field=keyword_field("tags"), value=tag) for tag in values)))


def rating_at_least(min_rating: float) -> SearchQuery:
    return _query(all_of(RangeMatch(field="rating", min=min_rating)))


def stock_greater_than(min_stock: int) -> SearchQuery:
    return _query(all_of(RangeMatch(field="stockQuantity", min=min_stock, exclusive_min=True)))


def active_by_keyword(keyword: str) -> SearchQuery:
    return _query(all_of(
        ExactMatch(field="active", value=True),
        any_of(
            TextMatch(field="name", value=keyword, boost=2.0),
            TextMatch(field="description", value=keyword),
            TextMatch(field="category", value=keyword),
        ),
    ))


def featured_in_price_range(min_price: Decimal, max_price: Decimal) -> SearchQuery:
    return _query(all_of(
        ExactMatch(field="featured", value=True),
        ExactMatch(field="active", value=True),
        RangeMatch(field="price", min=min_price, max=max_price),
    ))


def fuzzy(term: str) -> SearchQuery:
    """Typo-tolerant match on name, description and brand"""
    return _query(any_of(
        TextMatch(field="name", value=term, fuzzy=True),
        TextMatch(field="description", value=term, fuzzy=True),
        TextMatch(field="brand", value=term, fuzzy=True),
    ))


NAMED_QUERIES: Dict[str, Callable[..., SearchQuery]] = {
    "by_category": by_category,
    "by_brand": by_brand,
    "active": active,
    "featured": featured,
    "price_between": price_between,
    "name_or_description": name_or_description,
    "category_and_price_range": category_and_price_range,
    "tags": tags,
    "rating_at_least": rating_at_least,
    "stock_greater_than": stock_greater_than,
    "active_by_keyword": active_by_keyword,
    "featured_in_price_range": featured_in_price_range,
    "fuzzy": fuzzy,
}


def named_query(name: str, *args) -> SearchQuery:
    """Build the query registered under name; unknown names raise KeyError"""
    return NAMED_QUERIES[name](*args)
