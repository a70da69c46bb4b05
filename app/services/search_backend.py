"""
Search backends executing criteria trees against the products collection.

AtlasSearchBackend runs a $search aggregation on MongoDB Atlas;
LocalSearchBackend runs plain find() queries and is selected when
TEST_MODE is enabled. Both report driver errors as BackendFailure and
never retry.
"""
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, NamedTuple, Optional

from fastapi import Depends
from pymongo.errors import PyMongoError

import config
from database.mongodb import get_product_collection
from models.criteria import SearchQuery
from services import atlas_query, mongo_query
from utils.errors import BackendFailure

logger = logging.getLogger(__name__)

TERMS_LIMIT = 10
PRICE_BUCKET_WIDTH = 50


def terms_facet(field: str) -> List[Dict[str, Any]]:
    return [
        {"$match": {field: {"$ne": None}}},
        {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
        {"$sort": {"count": -1, "_id": 1}},
        {"$limit": TERMS_LIMIT},
    ]


# Catalog statistics over active products, computed entirely by MongoDB
AGGREGATION_PIPELINE = [
    {"$match": {"active": True}},
    {
        "$facet": {
            "categories": terms_facet("category"),
            "brands": terms_facet("brand"),
            "priceRanges": [
                {"$group": {
                    "_id": {"$multiply": [
                        {"$floor": {"$divide": ["$price", PRICE_BUCKET_WIDTH]}},
                        PRICE_BUCKET_WIDTH,
                    ]},
                    "count": {"$sum": 1},
                }},
                {"$sort": {"_id": 1}},
            ],
            "stats": [
                {"$group": {
                    "_id": None,
                    "avgRating": {"$avg": "$rating"},
                    "totalProducts": {"$sum": "$stockQuantity"},
                }},
            ],
        }
    },
]


class BackendResult(NamedTuple):
    matches: List[Dict[str, Any]]
    total: int
    took_ms: int


def _buckets(values: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{"key": item["_id"], "count": item["count"]} for item in values]


class SearchBackend(ABC):
    """Executes SearchQuery objects against a products collection"""

    name = "base"

    def __init__(self, collection):
        self.collection = collection

    @abstractmethod
    async def execute(self, query: SearchQuery, page: int = 0, size: Optional[int] = None) -> BackendResult:
        """
        Run the query and return one page of raw documents with the total hit count.
        size=None returns every match.
        """

    async def aggregate_active(self) -> Dict[str, Any]:
        try:
            results = await self.collection.aggregate(AGGREGATION_PIPELINE).to_list(1)
        except PyMongoError as e:
            raise BackendFailure(f"Aggregation failed: {e}") from e

        facets = results[0] if results else {}
        stats = (facets.get("stats") or [{}])[0]
        return {
            "categories": _buckets(facets.get("categories", [])),
            "brands": _buckets(facets.get("brands", [])),
            "priceRanges": _buckets(facets.get("priceRanges", [])),
            "avgRating": stats.get("avgRating") or 0.0,
            "totalProducts": stats.get("totalProducts") or 0,
        }


class AtlasSearchBackend(SearchBackend):
    name = "atlas"

    def __init__(self, collection, index_name: Optional[str] = None):
        super().__init__(collection)
        self.index_name = index_name or config.SEARCH_INDEX_NAME

    async def execute(self, query: SearchQuery, page: int = 0, size: Optional[int] = None) -> BackendResult:
        skip = page * size if size else 0
        pipeline = atlas_query.build_pipeline(query, self.index_name, skip=skip, limit=size)

        start_time = time.time()
        try:
            results = await self.collection.aggregate(pipeline).to_list(None if size is None else 1)
        except PyMongoError as e:
            raise BackendFailure(f"Atlas Search query failed: {e}") from e
        took_ms = int((time.time() - start_time) * 1000)

        if size is None:
            return BackendResult(matches=results, total=len(results), took_ms=took_ms)

        result = results[0] if results else {"docs": [], "meta": []}
        meta = result.get("meta") or [{}]
        total = meta[0].get("count", {}).get("lowerBound", 0)
        return BackendResult(matches=result.get("docs", []), total=int(total), took_ms=took_ms)


class LocalSearchBackend(SearchBackend):
    name = "local"

    async def execute(self, query: SearchQuery, page: int = 0, size: Optional[int] = None) -> BackendResult:
        mongo_filter = mongo_query.to_filter(query.criteria)
        sort = mongo_query.to_sort(query.sort)

        start_time = time.time()
        try:
            total = await self.collection.count_documents(mongo_filter)
            cursor = self.collection.find(mongo_filter)
            if sort:
                cursor = cursor.sort(sort)
            if size:
                cursor = cursor.skip(page * size).limit(size)

            matches = []
            async for doc in cursor:
                matches.append(doc)
        except PyMongoError as e:
            raise BackendFailure(f"Query failed: {e}") from e
        took_ms = int((time.time() - start_time) * 1000)

        return BackendResult(matches=matches, total=total, took_ms=took_ms)


def create_search_backend(collection, test_mode: Optional[bool] = None) -> SearchBackend:
    use_local = config.TEST_MODE if test_mode is None else test_mode
    if use_local:
        return LocalSearchBackend(collection)
    return AtlasSearchBackend(collection)


async def get_search_backend(collection=Depends(get_product_collection)) -> SearchBackend:
    """FastAPI dependency: backend chosen by TEST_MODE"""
    return create_search_backend(collection)
