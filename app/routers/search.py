from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

import config
from dependencies import get_api_key
from models.product import Product
from models.search import ResultPage, SearchFilters
from services import product_service, search_service
from services.search_backend import SearchBackend, get_search_backend

router = APIRouter(
    prefix="/api/search",
    tags=["Search"],
    dependencies=[Depends(get_api_key)]
)


@router.get("", response_model=ResultPage[Product])
async def search_products(
    query: str = Query(...),
    page: int = Query(0, ge=0),
    size: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    backend: SearchBackend = Depends(get_search_backend)
):
    """
    Full-text search over name (boosted), description, category and brand, ranked by relevance.
    """
    return await search_service.search(backend, query, page, size)


@router.get("/advanced", response_model=ResultPage[Product])
async def advanced_search(
    query: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    brand: Optional[str] = Query(None),
    minPrice: Optional[Decimal] = Query(None),
    maxPrice: Optional[Decimal] = Query(None),
    minRating: Optional[float] = Query(None),
    inStockOnly: Optional[bool] = Query(None),
    page: int = Query(0, ge=0),
    size: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    sortBy: str = Query("score", description="price, rating, name, created or score (relevance)"),
    sortDir: str = Query("desc", description="asc or desc; ignored for relevance"),
    backend: SearchBackend = Depends(get_search_backend)
):
    """
    Search with any combination of optional filters. Only active products are returned.
    """
    filters = SearchFilters(
        query=query,
        category=category,
        brand=brand,
        minPrice=minPrice,
        maxPrice=maxPrice,
        minRating=minRating,
        inStockOnly=inStockOnly,
        sortBy=sortBy,
        sortDirection=sortDir
    )
    return await search_service.advanced_search(backend, filters, page, size)


@router.get("/enhanced", response_model=List[Product])
async def search_active_products_by_keyword(
    keyword: str = Query(..., min_length=1),
    backend: SearchBackend = Depends(get_search_backend)
):
    """
    Keyword search restricted to active products, with name matches boosted
    """
    return await product_service.find_named(backend, "active_by_keyword", keyword)


@router.get("/fuzzy", response_model=List[Product])
async def fuzzy_search(
    query: str = Query(..., min_length=1),
    backend: SearchBackend = Depends(get_search_backend)
):
    """
    Typo-tolerant search on name, description and brand
    """
    return await product_service.find_named(backend, "fuzzy", query)


@router.get("/suggestions", response_model=List[str])
async def get_suggestions(
    input: str = Query(...),
    backend: SearchBackend = Depends(get_search_backend)
):
    """
    Autocomplete suggestions from product names, brands and categories
    """
    return await search_service.suggestions(backend, input)


@router.get("/aggregations", response_model=Dict[str, Any])
async def get_aggregations(backend: SearchBackend = Depends(get_search_backend)):
    """
    Category and brand counts, price buckets, average rating and total stock of active products
    """
    return await search_service.aggregations(backend)
