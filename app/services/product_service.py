"""
Create/read/update/delete operations on product documents, plus the
fixed catalog lookups from services.named_queries.
"""
import logging
from typing import List, Optional, Union

from bson import ObjectId
from pymongo.errors import PyMongoError

from models.product import Product, now_millis
from models.search import ResultPage, require_page_size
from services.named_queries import named_query
from services.search_backend import SearchBackend
from utils.errors import BackendFailure, ProductNotFound

logger = logging.getLogger(__name__)


async def save(collection, product: Product) -> Product:
    """
    Insert or replace a product. Products without an id get one from storage;
    updatedAt is refreshed on every save.
    """
    product = product.model_copy(update={"updatedAt": now_millis()})
    document = product.to_document()

    try:
        if product.id:
            await collection.replace_one({"id": product.id}, document, upsert=True)
        else:
            object_id = ObjectId()
            document["_id"] = object_id
            document["id"] = str(object_id)
            await collection.insert_one(document)
    except PyMongoError as e:
        raise BackendFailure(f"Saving product failed: {e}") from e

    return Product.from_document(document)


async def save_all(collection, products: List[Product]) -> List[Product]:
    saved = []
    for product in products:
        saved.append(await save(collection, product))
    logger.info(f"Saved {len(saved)} products")
    return saved


async def get(collection, product_id: str) -> Product:
    try:
        document = await collection.find_one({"id": product_id})
    except PyMongoError as e:
        raise BackendFailure(f"Loading product failed: {e}") from e
    if not document:
        raise ProductNotFound(product_id)
    return Product.from_document(document)


async def update(collection, product_id: str, product: Product) -> Product:
    """Replace an existing product; createdAt always keeps its stored value"""
    existing = await get(collection, product_id)
    product = product.model_copy(update={"id": product_id, "createdAt": existing.createdAt})
    return await save(collection, product)


async def delete(collection, product_id: str) -> None:
    try:
        result = await collection.delete_one({"id": product_id})
    except PyMongoError as e:
        raise BackendFailure(f"Deleting product failed: {e}") from e
    if result.deleted_count == 0:
        raise ProductNotFound(product_id)


async def delete_all(collection) -> int:
    try:
        result = await collection.delete_many({})
    except PyMongoError as e:
        raise BackendFailure(f"Deleting products failed: {e}") from e
    logger.info(f"Deleted {result.deleted_count} products")
    return result.deleted_count


async def list_all(collection) -> List[Product]:
    products = []
    try:
        async for document in collection.find({}):
            products.append(Product.from_document(document))
    except PyMongoError as e:
        raise BackendFailure(f"Listing products failed: {e}") from e
    return products


async def find_named(
    backend: SearchBackend,
    name: str,
    *args,
    page: Optional[int] = None,
    size: Optional[int] = None,
) -> Union[List[Product], ResultPage[Product]]:
    """
    Run a named catalog lookup. Without page/size every match is returned
    as a list, otherwise one ResultPage.
    """
    query = named_query(name, *args)
    if size is None:
        result = await backend.execute(query)
        return [Product.from_document(doc) for doc in result.matches]

    page = page or 0
    require_page_size(size)
    result = await backend.execute(query, page=page, size=size)
    return ResultPage[Product].build(
        [Product.from_document(doc) for doc in result.matches],
        total_elements=result.total,
        current_page=page,
        size=size,
        search_time_ms=result.took_ms,
    )
