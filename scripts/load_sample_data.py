#!/usr/bin/env python3
"""
Load the sample product catalog into a running API through /api/products/bulk.

Usage:
    python scripts/load_sample_data.py --api-url http://localhost:8000 --api-key your_api_key [--replace]
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List

import requests
from dotenv import load_dotenv
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

# Add app directory to path
APP_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "app")
sys.path.insert(0, APP_DIR)

from services.sample_data import SAMPLE_PRODUCTS  # noqa: E402

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("load_sample_data")

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_API_KEY = os.getenv("API_KEY", "your_default_api_key")
DEFAULT_TIMEOUT = 30  # seconds
MAX_RETRIES = 3
RETRY_BACKOFF = 0.5


def create_session() -> requests.Session:
    """
    Create a requests session that retries idempotent calls.
    Bulk inserts are not retried, products without an id would be duplicated.
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=MAX_RETRIES,
        backoff_factor=RETRY_BACKOFF,
        status_forcelist=[408, 429, 500, 502, 503, 504],
        allowed_methods=["GET", "DELETE"]
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    return session


def check_api_health(api_url: str, session: requests.Session) -> bool:
    try:
        response = session.get(f"{api_url}/health", timeout=DEFAULT_TIMEOUT)
        response.raise_for_status()
        health = response.json()
    except requests.RequestException as e:
        logger.error(f"API health check failed: {e}")
        return False

    if health.get("status") != "healthy":
        logger.error(f"API is not healthy: {health}")
        return False

    logger.info(f"API is healthy, search backend: {health.get('search_backend')}")
    return True


def delete_products(api_url: str, headers: Dict[str, str], session: requests.Session) -> None:
    response = session.delete(f"{api_url}/api/products/bulk", headers=headers, timeout=DEFAULT_TIMEOUT)
    response.raise_for_status()
    logger.info("Removed existing products")


def load_products(api_url: str, headers: Dict[str, str], products: List[Dict[str, Any]],
                  session: requests.Session) -> List[Dict[str, Any]]:
    response = session.post(
        f"{api_url}/api/products/bulk",
        headers=headers,
        json=products,
        timeout=DEFAULT_TIMEOUT
    )
    response.raise_for_status()
    return response.json()


def main():
    parser = argparse.ArgumentParser(description="Load the sample product catalog")
    parser.add_argument("--api-url", default=DEFAULT_API_URL, help="API base URL")
    parser.add_argument("--api-key", default=DEFAULT_API_KEY, help="API key for authorization")
    parser.add_argument("--replace", action="store_true", help="Delete all products before loading")

    args = parser.parse_args()

    api_url = args.api_url.rstrip("/")
    headers = {"Content-Type": "application/json", "x-apikey": args.api_key}
    session = create_session()

    if not check_api_health(api_url, session):
        sys.exit(1)

    try:
        if args.replace:
            delete_products(api_url, headers, session)
        created = load_products(api_url, headers, SAMPLE_PRODUCTS, session)
    except requests.RequestException as e:
        logger.error(f"Loading sample data failed: {e}")
        sys.exit(1)

    for product in created:
        logger.info(f"  {product['id']}: {product['name']} ({product['category']}, {product['price']})")
    logger.info(f"Loaded {len(created)} products")


if __name__ == "__main__":
    main()
