"""
Tests for the search backends
"""
import pytest
from pymongo.errors import ServerSelectionTimeoutError

from models.criteria import ExactMatch, SearchQuery, all_of
from models.product import Product
from services.query_builder import build_query
from services.search_backend import (
    AtlasSearchBackend, LocalSearchBackend, SearchBackend, create_search_backend,
)
from tests.fake_collection import FakeCollection
from utils.errors import BackendFailure


@pytest.mark.asyncio
async def test_local_backend_filters_and_counts(catalog):
    backend = LocalSearchBackend(catalog)

    result = await backend.execute(build_query(query="apple"), page=0, size=2)

    assert result.total == 4
    assert len(result.matches) == 2
    assert all(doc["active"] for doc in result.matches)


@pytest.mark.asyncio
async def test_local_backend_sorts_and_pages(catalog):
    backend = LocalSearchBackend(catalog)
    query = build_query(sortBy="price", sortDirection="asc")

    first = await backend.execute(query, page=0, size=3)
    second = await backend.execute(query, page=1, size=3)

    assert [doc["name"] for doc in first.matches] == ["AirPods Pro", "Nintendo Switch", "Sony WH-1000XM5"]
    assert [doc["price"] for doc in second.matches] == [799.0, 799.0, 999.0]
    assert first.total == second.total == 9


@pytest.mark.asyncio
async def test_local_backend_without_size_returns_all(catalog):
    backend = LocalSearchBackend(catalog)

    result = await backend.execute(SearchQuery(criteria=all_of(ExactMatch(field="featured", value=True))))

    assert result.total == 4
    assert len(result.matches) == 4


@pytest.mark.asyncio
async def test_atlas_backend_parses_facet_result(fake_collection):
    fake_collection.aggregate_result = [{
        "docs": [{"id": "prod3", "name": "iPhone 15 Pro"}],
        "meta": [{"count": {"lowerBound": 1001}}],
    }]
    backend = AtlasSearchBackend(fake_collection, index_name="test_index")

    result = await backend.execute(build_query(query="iphone"), page=2, size=5)

    assert result.total == 1001
    assert result.matches == [{"id": "prod3", "name": "iPhone 15 Pro"}]
    (pipeline,) = fake_collection.pipelines
    assert pipeline[0]["$search"]["index"] == "test_index"
    assert pipeline[1]["$facet"]["docs"] == [{"$skip": 10}, {"$limit": 5}]


@pytest.mark.asyncio
async def test_atlas_backend_handles_empty_result(fake_collection):
    fake_collection.aggregate_result = []
    backend = AtlasSearchBackend(fake_collection)

    result = await backend.execute(build_query(), page=0, size=10)

    assert result.total == 0
    assert result.matches == []


@pytest.mark.asyncio
@pytest.mark.parametrize("backend_class", [AtlasSearchBackend, LocalSearchBackend])
async def test_driver_errors_become_backend_failures(fake_collection, backend_class):
    fake_collection.error = ServerSelectionTimeoutError("no servers available")
    backend = backend_class(fake_collection)

    with pytest.raises(BackendFailure) as exc_info:
        await backend.execute(build_query(query="tv"), page=0, size=10)

    assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)


@pytest.mark.asyncio
async def test_aggregation_result_is_reshaped(fake_collection):
    fake_collection.aggregate_result = [{
        "categories": [{"_id": "Audio", "count": 2}, {"_id": "Laptops", "count": 2}],
        "brands": [{"_id": "Apple", "count": 3}],
        "priceRanges": [{"_id": 200.0, "count": 2}],
        "stats": [{"_id": None, "avgRating": 4.675, "totalProducts": 710}],
    }]
    backend = LocalSearchBackend(fake_collection)

    result = await backend.aggregate_active()

    assert result == {
        "categories": [{"key": "Audio", "count": 2}, {"key": "Laptops", "count": 2}],
        "brands": [{"key": "Apple", "count": 3}],
        "priceRanges": [{"key": 200.0, "count": 2}],
        "avgRating": 4.675,
        "totalProducts": 710,
    }
    (pipeline,) = fake_collection.pipelines
    assert pipeline[0] == {"$match": {"active": True}}


@pytest.mark.asyncio
async def test_aggregations_on_empty_collection(fake_collection):
    fake_collection.aggregate_result = [{"categories": [], "brands": [], "priceRanges": [], "stats": []}]

    result = await LocalSearchBackend(fake_collection).aggregate_active()

    assert result["avgRating"] == 0.0
    assert result["totalProducts"] == 0


@pytest.mark.asyncio
async def test_atlas_backend_streams_unpaged_results(fake_collection):
    fake_collection.aggregate_result = [{"id": "prod1"}, {"id": "prod3"}, {"id": "prod5"}]
    backend = AtlasSearchBackend(fake_collection, index_name="test_index")

    result = await backend.execute(SearchQuery(criteria=all_of(ExactMatch(field="featured", value=True))))

    assert result.total == 3
    assert [doc["id"] for doc in result.matches] == ["prod1", "prod3", "prod5"]
    (pipeline,) = fake_collection.pipelines
    assert len(pipeline) == 1
    assert "$search" in pipeline[0]


@pytest.mark.asyncio
async def test_aggregations_over_catalog(catalog):
    result = await LocalSearchBackend(catalog).aggregate_active()

    # prod9 is inactive and left out; prod10 counts with zero stock
    assert result["categories"] == [
        {"key": "Smartphones", "count": 3},
        {"key": "Audio", "count": 2},
        {"key": "Laptops", "count": 2},
        {"key": "Electronics", "count": 1},
        {"key": "Gaming", "count": 1},
    ]
    assert result["brands"][0] == {"key": "Apple", "count": 4}
    assert [bucket["key"] for bucket in result["brands"][1:]] == ["Dell", "LG", "Nintendo", "Samsung", "Sony"]
    assert result["priceRanges"] == [
        {"key": 200, "count": 1},
        {"key": 250, "count": 1},
        {"key": 350, "count": 1},
        {"key": 750, "count": 2},
        {"key": 950, "count": 1},
        {"key": 1250, "count": 1},
        {"key": 1450, "count": 1},
        {"key": 2350, "count": 1},
    ]
    assert result["avgRating"] == pytest.approx(41.9 / 9)
    assert result["totalProducts"] == 710


@pytest.mark.asyncio
async def test_aggregations_keep_top_ten_terms(fake_collection):
    fake_collection.seed([
        Product(name=f"Item {i}", category="Misc", brand=f"Brand {i:02d}", price=10 + i).to_document()
        for i in range(12)
    ])

    result = await LocalSearchBackend(fake_collection).aggregate_active()

    assert [bucket["key"] for bucket in result["brands"]] == [f"Brand {i:02d}" for i in range(10)]
    assert result["categories"] == [{"key": "Misc", "count": 12}]


@pytest.mark.asyncio
async def test_aggregations_skip_missing_brands(fake_collection):
    fake_collection.seed([
        Product(name="Generic cable", category="Accessories", price=5).to_document(),
        Product(name="AirTag", category="Accessories", brand="Apple", price=29).to_document(),
    ])

    result = await LocalSearchBackend(fake_collection).aggregate_active()

    assert result["brands"] == [{"key": "Apple", "count": 1}]
    assert result["priceRanges"] == [{"key": 0, "count": 2}]


def test_backend_selection():
    collection = FakeCollection()

    assert isinstance(create_search_backend(collection, test_mode=True), LocalSearchBackend)
    assert isinstance(create_search_backend(collection, test_mode=False), AtlasSearchBackend)


def test_backend_base_class_is_abstract():
    with pytest.raises(TypeError):
        SearchBackend(FakeCollection())
