"""
Tests for the search endpoints running against the local backend
"""
import pytest
from pymongo.errors import ServerSelectionTimeoutError

from services.monitoring import SearchMetrics

HEADERS = {"x-apikey": "test_api_key"}


def product_names(page):
    return [product["name"] for product in page["content"]]


def test_search_requires_api_key(test_client, catalog):
    assert test_client.get("/api/search?query=iphone").status_code == 401


def test_basic_search_returns_active_matches(test_client, catalog):
    response = test_client.get("/api/search?query=iphone", headers=HEADERS)

    assert response.status_code == 200
    page = response.json()
    # prod9 matches the text but is inactive
    assert sorted(product["id"] for product in page["content"]) == ["prod10", "prod3"]
    assert page["totalElements"] == 2
    assert page["totalPages"] == 1
    assert page["currentPage"] == 0
    assert page["size"] == 10


def test_basic_search_is_recorded(test_client, catalog):
    test_client.get("/api/search?query=sony", headers=HEADERS)

    (entry,) = SearchMetrics.get_recent_searches()
    assert entry["operation"] == "search"
    assert entry["query"] == "sony"
    assert entry["results_count"] == 1


def test_advanced_search_combines_filters(test_client, catalog):
    params = {
        "query": "iPhon",
        "minPrice": 500,
        "maxPrice": 1200,
        "inStockOnly": "true",
        "sortBy": "price",
        "sortDir": "asc",
    }

    response = test_client.get("/api/search/advanced", params=params, headers=HEADERS)

    assert response.status_code == 200
    page = response.json()
    # prod9 is inactive, prod10 has no stock
    assert [product["id"] for product in page["content"]] == ["prod3"]
    assert page["totalElements"] == 1


def test_advanced_search_sorts_by_price(test_client, catalog):
    params = {"query": "apple", "maxPrice": 1000, "inStockOnly": "true", "sortBy": "price"}

    ascending = test_client.get("/api/search/advanced", params={**params, "sortDir": "asc"}, headers=HEADERS)
    descending = test_client.get("/api/search/advanced", params={**params, "sortDir": "desc"}, headers=HEADERS)

    assert product_names(ascending.json()) == ["AirPods Pro", "iPhone 15 Pro"]
    assert product_names(descending.json()) == ["iPhone 15 Pro", "AirPods Pro"]


def test_advanced_search_without_filters_returns_all_active(test_client, catalog):
    response = test_client.get("/api/search/advanced?size=4", headers=HEADERS)

    page = response.json()
    assert page["totalElements"] == 9
    assert page["totalPages"] == 3
    assert len(page["content"]) == 4
    assert all(product["active"] for product in page["content"])


def test_advanced_search_by_category_and_rating(test_client, catalog):
    response = test_client.get("/api/search/advanced?category=Audio&minRating=4.8", headers=HEADERS)

    assert product_names(response.json()) == ["Sony WH-1000XM5"]


def test_advanced_search_by_brand_and_name_sort(test_client, catalog):
    response = test_client.get("/api/search/advanced?brand=Apple&sortBy=name&sortDir=asc", headers=HEADERS)

    assert product_names(response.json()) == ["AirPods Pro", "MacBook Pro 16-inch", "iPhone 15", "iPhone 15 Pro"]


def test_advanced_search_page_past_the_end(test_client, catalog):
    response = test_client.get("/api/search/advanced?page=5&size=10", headers=HEADERS)

    page = response.json()
    assert page["content"] == []
    assert page["totalElements"] == 9
    assert page["totalPages"] == 1
    assert page["currentPage"] == 5


def test_page_size_limits(test_client, catalog):
    assert test_client.get("/api/search?query=tv&size=0", headers=HEADERS).status_code == 422
    assert test_client.get("/api/search?query=tv&size=101", headers=HEADERS).status_code == 422
    assert test_client.get("/api/search/advanced?page=-1", headers=HEADERS).status_code == 422


def test_enhanced_search(test_client, catalog):
    response = test_client.get("/api/search/enhanced?keyword=audio", headers=HEADERS)

    assert response.status_code == 200
    assert sorted(product["name"] for product in response.json()) == ["AirPods Pro", "Sony WH-1000XM5"]


def test_fuzzy_search(test_client, catalog):
    response = test_client.get("/api/search/fuzzy?query=galaxy", headers=HEADERS)

    assert [product["name"] for product in response.json()] == ["Samsung Galaxy S24"]


def test_suggestions(test_client, catalog):
    response = test_client.get("/api/search/suggestions?input=ni", headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == ["Nintendo Switch", "Nintendo"]


def test_suggestions_are_distinct(test_client, catalog):
    response = test_client.get("/api/search/suggestions?input=app", headers=HEADERS)

    assert response.json() == ["Apple"]


def test_suggestions_need_two_characters(test_client, catalog):
    response = test_client.get("/api/search/suggestions?input=a", headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == []


def test_aggregations(test_client, catalog):
    response = test_client.get("/api/search/aggregations", headers=HEADERS)

    assert response.status_code == 200
    result = response.json()
    assert result["categories"][0] == {"key": "Smartphones", "count": 3}
    assert result["brands"][0] == {"key": "Apple", "count": 4}
    assert {"key": 750, "count": 2} in result["priceRanges"]
    assert result["avgRating"] == pytest.approx(4.656, abs=0.001)
    assert result["totalProducts"] == 710
    assert "executionTimeMs" in result


def test_backend_failure_returns_503(test_client, catalog):
    catalog.error = ServerSelectionTimeoutError("no servers available")

    response = test_client.get("/api/search?query=iphone", headers=HEADERS)

    assert response.status_code == 503
    assert "no servers available" in response.json()["detail"]
