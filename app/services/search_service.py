"""
Search operations behind the /api/search endpoints.

Queries are assembled by services.query_builder, executed by a
SearchBackend and shaped into ResultPage objects. Backend failures
propagate to the caller unchanged.
"""
import logging
import time
from typing import Any, Dict, List

from models.criteria import PrefixMatch, SearchQuery, any_of
from models.product import Product
from models.search import ResultPage, SearchFilters, require_page_size
from services.monitoring import SearchMetrics
from services.query_builder import build_query
from services.search_backend import SearchBackend
from utils.helpers import log_search_query

logger = logging.getLogger(__name__)

SUGGESTION_MIN_LENGTH = 2
SUGGESTION_LIMIT = 10
SUGGESTION_FIELDS = ("name", "brand", "category")


async def run_query(
    backend: SearchBackend,
    query: SearchQuery,
    page: int,
    size: int,
) -> ResultPage[Product]:
    require_page_size(size)
    start_time = time.time()
    result = await backend.execute(query, page=page, size=size)
    products = [Product.from_document(doc) for doc in result.matches]
    search_time_ms = int((time.time() - start_time) * 1000)

    return ResultPage[Product].build(
        products,
        total_elements=result.total,
        current_page=page,
        size=size,
        search_time_ms=search_time_ms,
    )


async def search(backend: SearchBackend, query: str, page: int = 0, size: int = 10) -> ResultPage[Product]:
    """Free-text search across name, description, category and brand, by relevance"""
    log_search_query("search", {"query": query, "page": page, "size": size})
    response = await run_query(backend, build_query(query=query), page, size)

    SearchMetrics.record_search("search", query, None, response.totalElements, response.searchTimeMs)
    logger.debug(f"Full-text search completed in {response.searchTimeMs}ms, found {response.totalElements} results")
    return response


async def advanced_search(
    backend: SearchBackend,
    filters: SearchFilters,
    page: int = 0,
    size: int = 10,
) -> ResultPage[Product]:
    filter_values = filters.model_dump(exclude_none=True)
    log_search_query("advanced", filter_values)
    response = await run_query(backend, build_query(filters), page, size)

    SearchMetrics.record_search(
        "advanced", filters.query, filter_values, response.totalElements, response.searchTimeMs
    )
    logger.debug(f"Advanced search completed in {response.searchTimeMs}ms, found {response.totalElements} results")
    return response


async def suggestions(backend: SearchBackend, text: str) -> List[str]:
    """
    Type-ahead suggestions: distinct names, brands and categories that
    start with the input, in hit order.
    """
    if text is None or len(text) < SUGGESTION_MIN_LENGTH:
        return []

    start_time = time.time()
    query = SearchQuery(
        criteria=any_of(*(PrefixMatch(field=field, value=text) for field in SUGGESTION_FIELDS))
    )
    result = await backend.execute(query, page=0, size=SUGGESTION_LIMIT)

    prefix = text.lower()
    found: List[str] = []
    for doc in result.matches:
        for field in SUGGESTION_FIELDS:
            value = doc.get(field)
            if value and value.lower().startswith(prefix) and value not in found:
                found.append(value)

    logger.debug(f"Generated {len(found)} suggestions in {int((time.time() - start_time) * 1000)}ms")
    return found


async def aggregations(backend: SearchBackend) -> Dict[str, Any]:
    start_time = time.time()
    result = await backend.aggregate_active()
    result["executionTimeMs"] = int((time.time() - start_time) * 1000)
    logger.debug(
        f"Generated aggregations: {len(result['categories'])} categories, "
        f"{len(result['brands'])} brands, avg rating: {result['avgRating']}"
    )
    return result
