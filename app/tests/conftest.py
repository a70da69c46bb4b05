"""Pytest configuration for the Product Search API tests."""
import os
import sys

import pytest

# Add app directory to path to enable proper imports
sys.path.insert(0, os.path.abspath(os.path.dirname(os.path.dirname(__file__))))

# Environment must be in place before config is imported
os.environ["MONGODB_URI"] = "mongodb://localhost:27017/test_db"
os.environ["API_KEY"] = "test_api_key"
os.environ["TEST_MODE"] = "true"
os.environ["SEED_SAMPLE_DATA"] = "false"

from tests.fake_collection import FakeCollection, FakeDatabase  # noqa: E402

TEST_API_KEY = "test_api_key"
HEADERS = {"x-apikey": TEST_API_KEY}


def catalog_documents():
    """Sample catalog as stored documents, with stable ids"""
    from models.product import Product
    from services.sample_data import SAMPLE_PRODUCTS

    documents = []
    for i, data in enumerate(SAMPLE_PRODUCTS, start=1):
        product = Product(id=f"prod{i}", createdAt=1700000000000 + i, updatedAt=1700000000000 + i, **data)
        documents.append(product.to_document())

    # One inactive and one out-of-stock product to exercise the filters
    documents.append(Product(
        id="prod9", name="iPhone 12", description="Discontinued Apple iPhone", category="Smartphones",
        brand="Apple", price=499, stockQuantity=10, rating=4.1, active=False,
        createdAt=1700000000009, updatedAt=1700000000009,
    ).to_document())
    documents.append(Product(
        id="prod10", name="iPhone 15", description="Apple iPhone with A16 chip", category="Smartphones",
        brand="Apple", price=799, stockQuantity=0, rating=4.5,
        createdAt=1700000000010, updatedAt=1700000000010,
    ).to_document())
    return documents


@pytest.fixture
def fake_collection():
    return FakeCollection("products")


@pytest.fixture
def catalog(fake_collection):
    fake_collection.seed(catalog_documents())
    return fake_collection


@pytest.fixture
def test_client(fake_collection):
    """Create a test client for the FastAPI application backed by the fake collection"""
    from fastapi.testclient import TestClient
    from database.mongodb import get_db, get_product_collection
    from main import app

    app.dependency_overrides[get_product_collection] = lambda: fake_collection
    app.dependency_overrides[get_db] = lambda: FakeDatabase(products=fake_collection)
    # The lifespan (real MongoDB connection) only runs inside a `with` block, so it is skipped here
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_search_metrics():
    from services.monitoring import SearchMetrics
    SearchMetrics.reset()
    yield
