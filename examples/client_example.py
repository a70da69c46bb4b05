#!/usr/bin/env python3
"""
Example client for the Product Search API.
This script demonstrates how to interact with the search and catalog endpoints.
"""

import requests
import json
import argparse
import sys

# Default API settings
DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_API_KEY = "your_default_api_key"  # Should match your .env API_KEY value


class SearchAPIClient:
    """Client for interacting with the Product Search API"""

    def __init__(self, api_url, api_key):
        self.api_url = api_url
        self.api_key = api_key
        self.headers = {
            "Content-Type": "application/json",
            "x-apikey": api_key
        }

    def _get(self, path, params=None):
        response = requests.get(f"{self.api_url}{path}", headers=self.headers, params=params)
        if response.status_code == 200:
            return response.json()
        print(f"Request to {path} failed: {response.status_code}")
        print(response.text)
        return None

    def health_check(self):
        """Check if the API is healthy"""
        response = requests.get(f"{self.api_url}/health")
        return response.json()

    def search(self, query, page=0, size=10):
        """Full-text search ranked by relevance"""
        return self._get("/api/search", {"query": query, "page": page, "size": size})

    def advanced_search(self, page=0, size=10, **filters):
        """
        Search with optional filters: query, category, brand, minPrice, maxPrice,
        minRating, inStockOnly, sortBy, sortDir
        """
        params = {key: value for key, value in filters.items() if value is not None}
        params.update({"page": page, "size": size})
        return self._get("/api/search/advanced", params)

    def suggestions(self, text):
        return self._get("/api/search/suggestions", {"input": text})

    def fuzzy_search(self, query):
        return self._get("/api/search/fuzzy", {"query": query})

    def aggregations(self):
        return self._get("/api/search/aggregations")

    def products_by_category(self, category, page=0, size=10):
        return self._get(f"/api/products/category/{category}/page", {"page": page, "size": size})


def print_page(page):
    print(f"Found {page['totalElements']} results (page {page['currentPage'] + 1} of {page['totalPages']})")
    for i, product in enumerate(page["content"]):
        print(f"{i+1}. {product['name']} ({product['id']}) - {product['price']} - rating {product['rating']}")


def main():
    parser = argparse.ArgumentParser(description="Example client for the Product Search API")
    parser.add_argument("--api-url", default=DEFAULT_API_URL, help="API base URL")
    parser.add_argument("--api-key", default=DEFAULT_API_KEY, help="API key for authorization")
    parser.add_argument("--action", choices=["search", "advanced", "suggestions", "aggregations", "all"],
                        default="all", help="Action to perform")

    args = parser.parse_args()

    client = SearchAPIClient(args.api_url, args.api_key)

    print("Checking API health...")
    health = client.health_check()
    print(f"Health status: {json.dumps(health, indent=2)}")
    print()

    if health.get("status") != "healthy":
        print("API is not healthy. Exiting.")
        sys.exit(1)

    if args.action == "search" or args.action == "all":
        print("Testing search...")
        for query in ["iphone", "wireless", "laptop"]:
            print(f"\nSearching for '{query}':")
            page = client.search(query, size=3)
            if page:
                print_page(page)

        print("\nTesting fuzzy search for 'samsng':")
        results = client.fuzzy_search("samsng")
        if results is not None:
            for product in results:
                print(f"- {product['name']}")

    if args.action == "advanced" or args.action == "all":
        print("\nTesting advanced search...")
        examples = [
            {"query": "iPhone", "minPrice": 500, "maxPrice": 1200, "inStockOnly": True,
             "sortBy": "price", "sortDir": "asc"},
            {"category": "Audio", "minRating": 4.5},
            {"brand": "Apple", "sortBy": "rating"},
        ]
        for filters in examples:
            print(f"\nAdvanced search with {filters}:")
            page = client.advanced_search(**filters)
            if page:
                print_page(page)

    if args.action == "suggestions" or args.action == "all":
        print("\nTesting suggestions...")
        for text in ["ip", "sam", "au"]:
            print(f"\nSuggestions for '{text}': {client.suggestions(text)}")

    if args.action == "aggregations" or args.action == "all":
        print("\nTesting aggregations...")
        result = client.aggregations()
        if result:
            print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
