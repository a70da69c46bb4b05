from decimal import Decimal
from typing import List

from fastapi import APIRouter, Body, Depends, Query, Response, status

import config
from database.mongodb import get_product_collection
from dependencies import get_api_key
from models.product import Product
from models.search import ResultPage
from services import product_service
from services.search_backend import SearchBackend, get_search_backend

router = APIRouter(
    prefix="/api/products",
    tags=["Products"],
    dependencies=[Depends(get_api_key)]
)

@router.post("", status_code=status.HTTP_201_CREATED, response_model=Product)
async def create_product(product: Product = Body(...), collection=Depends(get_product_collection)):
    """
    Create a product. The id is assigned by storage unless one is supplied.
    """
    return await product_service.save(collection, product)


@router.get("", response_model=List[Product])
async def get_all_products(collection=Depends(get_product_collection)):
    return await product_service.list_all(collection)


@router.post("/bulk", status_code=status.HTTP_201_CREATED, response_model=List[Product])
async def create_products(products: List[Product] = Body(...), collection=Depends(get_product_collection)):
    return await product_service.save_all(collection, products)


@router.delete("/bulk", status_code=status.HTTP_204_NO_CONTENT)
async def delete_all_products(collection=Depends(get_product_collection)):
    await product_service.delete_all(collection)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/category/{category}", response_model=List[Product])
async def get_products_by_category(category: str, backend: SearchBackend = Depends(get_search_backend)):
    return await product_service.find_named(backend, "by_category", category)


@router.get("/category/{category}/page", response_model=ResultPage[Product])
async def get_products_by_category_paged(
    category: str,
    page: int = Query(0, ge=0),
    size: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    backend: SearchBackend = Depends(get_search_backend)
):
    return await product_service.find_named(backend, "by_category", category, page=page, size=size)


@router.get("/category/{category}/price-range", response_model=List[Product])
async def get_products_by_category_and_price_range(
    category: str,
    minPrice: Decimal = Query(...),
    maxPrice: Decimal = Query(...),
    backend: SearchBackend = Depends(get_search_backend)
):
    return await product_service.find_named(backend, "category_and_price_range", category, minPrice, maxPrice)


@router.get("/brand/{brand}", response_model=List[Product])
async def get_products_by_brand(brand: str, backend: SearchBackend = Depends(get_search_backend)):
    return await product_service.find_named(backend, "by_brand", brand)


@router.get("/featured", response_model=List[Product])
async def get_featured_products(backend: SearchBackend = Depends(get_search_backend)):
    return await product_service.find_named(backend, "featured")


@router.get("/featured/price-range", response_model=List[Product])
async def get_featured_products_in_price_range(
    minPrice: Decimal = Query(...),
    maxPrice: Decimal = Query(...),
    backend: SearchBackend = Depends(get_search_backend)
):
    return await product_service.find_named(backend, "featured_in_price_range", minPrice, maxPrice)


@router.get("/high-rated", response_model=List[Product])
async def get_high_rated_products(
    minRating: float = Query(4.0, ge=0.0, le=5.0),
    backend: SearchBackend = Depends(get_search_backend)
):
    return await product_service.find_named(backend, "rating_at_least", minRating)


@router.get("/in-stock", response_model=List[Product])
async def get_in_stock_products(
    minStock: int = Query(0, ge=0),
    backend: SearchBackend = Depends(get_search_backend)
):
    return await product_service.find_named(backend, "stock_greater_than", minStock)


@router.get("/price-range", response_model=List[Product])
async def get_products_by_price_range(
    minPrice: Decimal = Query(...),
    maxPrice: Decimal = Query(...),
    backend: SearchBackend = Depends(get_search_backend)
):
    return await product_service.find_named(backend, "price_between", minPrice, maxPrice)


@router.get("/price-range/page", response_model=ResultPage[Product])
async def get_products_by_price_range_paged(
    minPrice: Decimal = Query(...),
    maxPrice: Decimal = Query(...),
    page: int = Query(0, ge=0),
    size: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    backend: SearchBackend = Depends(get_search_backend)
):
    return await product_service.find_named(backend, "price_between", minPrice, maxPrice, page=page, size=size)


@router.get("/tags", response_model=List[Product])
async def get_products_by_tags(
    tags: List[str] = Query(...),
    backend: SearchBackend = Depends(get_search_backend)
):
    return await product_service.find_named(backend, "tags", *tags)


@router.get("/text-search", response_model=List[Product])
async def search_in_name_or_description(
    query: str = Query(..., min_length=1),
    backend: SearchBackend = Depends(get_search_backend)
):
    return await product_service.find_named(backend, "name_or_description", query)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, collection=Depends(get_product_collection)):
    return await product_service.get(collection, product_id)


@router.put("/{product_id}", response_model=Product)
async def update_product(product_id: str, product: Product = Body(...),
                         collection=Depends(get_product_collection)):
    """
    Replace a product. createdAt keeps its stored value, updatedAt is refreshed.
    """
    return await product_service.update(collection, product_id, product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, collection=Depends(get_product_collection)):
    await product_service.delete(collection, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
