"""
Demo catalog loaded at startup when SEED_SAMPLE_DATA is enabled
"""
import logging

from models.product import Product
from services import product_service

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = [
    {"name": "MacBook Pro 16-inch", "description": "Apple MacBook Pro with M2 chip", "category": "Laptops",
     "brand": "Apple", "price": 2399.00, "stockQuantity": 50, "rating": 4.8, "reviewCount": 120,
     "tags": ["laptop", "apple", "professional"], "active": True, "featured": True},
    {"name": "Dell XPS 13", "description": "Ultra-thin Dell laptop with Intel i7", "category": "Laptops",
     "brand": "Dell", "price": 1299.00, "stockQuantity": 30, "rating": 4.5, "reviewCount": 85,
     "tags": ["laptop", "dell", "ultrabook"], "active": True, "featured": False},
    {"name": "iPhone 15 Pro", "description": "Latest Apple iPhone with A17 chip", "category": "Smartphones",
     "brand": "Apple", "price": 999.00, "stockQuantity": 100, "rating": 4.7, "reviewCount": 200,
     "tags": ["smartphone", "apple", "5G"], "active": True, "featured": True},
    {"name": "Samsung Galaxy S24", "description": "Android smartphone with advanced camera",
     "category": "Smartphones", "brand": "Samsung", "price": 799.00, "stockQuantity": 75, "rating": 4.4,
     "reviewCount": 150, "tags": ["smartphone", "samsung", "android"], "active": True, "featured": False},
    {"name": "Sony WH-1000XM5", "description": "Noise-canceling wireless headphones", "category": "Audio",
     "brand": "Sony", "price": 399.00, "stockQuantity": 200, "rating": 4.9, "reviewCount": 300,
     "tags": ["headphones", "wireless", "noise-canceling"], "active": True, "featured": True},
    {"name": "AirPods Pro", "description": "Apple wireless earbuds with ANC", "category": "Audio",
     "brand": "Apple", "price": 249.00, "stockQuantity": 150, "rating": 4.6, "reviewCount": 180,
     "tags": ["earbuds", "apple", "wireless"], "active": True, "featured": False},
    {"name": "LG OLED TV 55\"", "description": "4K OLED Smart TV with HDR", "category": "Electronics",
     "brand": "LG", "price": 1499.00, "stockQuantity": 25, "rating": 4.7, "reviewCount": 95,
     "tags": ["tv", "oled", "4k", "smart"], "active": True, "featured": False},
    {"name": "Nintendo Switch", "description": "Hybrid gaming console", "category": "Gaming",
     "brand": "Nintendo", "price": 299.00, "stockQuantity": 80, "rating": 4.8, "reviewCount": 220,
     "tags": ["gaming", "console", "portable"], "active": True, "featured": True},
]


async def seed_sample_data(collection) -> int:
    """Insert the sample catalog into an empty collection; returns the number of products added"""
    if await collection.count_documents({}) > 0:
        logger.info("Sample data already exists, skipping initialization")
        return 0

    products = [Product(**data) for data in SAMPLE_PRODUCTS]
    saved = await product_service.save_all(collection, products)
    logger.info(f"Sample data initialized with {len(saved)} products")
    return len(saved)
