"""
Runtime configuration for the Product Search API.
Values come from the environment (optionally a .env file) and are read once at import.
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/productdb")
DEFAULT_DATABASE_NAME = "productdb"
PRODUCT_COLLECTION = os.getenv("PRODUCT_COLLECTION", "products")
SEARCH_INDEX_NAME = os.getenv("SEARCH_INDEX_NAME", "product_search")

# TEST_MODE swaps Atlas Search for plain regex queries against the collection
TEST_MODE = _flag("TEST_MODE")
SEED_SAMPLE_DATA = _flag("SEED_SAMPLE_DATA")

API_KEY = os.getenv("API_KEY", "your_default_api_key")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))
