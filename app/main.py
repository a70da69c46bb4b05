import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from database.mongodb import db, init_indexes
from dependencies import get_api_key
from routers import health, products, search
from services.monitoring import APIMonitoringMiddleware, SearchMetrics
from services.sample_data import seed_sample_data
from utils.errors import BackendFailure, InvalidPageSize, ProductNotFound
from utils.helpers import configure_logging

configure_logging()
logger = logging.getLogger(__name__)


# Lifespan for FastAPI
@asynccontextmanager
async def lifespan(app: FastAPI):
    db.initialize(config.MONGODB_URI)
    await init_indexes()

    if config.SEED_SAMPLE_DATA:
        await seed_sample_data(db.db[config.PRODUCT_COLLECTION])

    backend = "local regex queries" if config.TEST_MODE else "MongoDB Atlas Search"
    logger.info(f"Connected to MongoDB, searching with {backend}")
    yield
    db.close()
    logger.info("MongoDB connection closed")


app = FastAPI(
    title="Product Search API",
    description="CRUD and search endpoints for a product catalog backed by MongoDB Atlas Search",
    version=config.APP_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(APIMonitoringMiddleware)

app.include_router(products.router)
app.include_router(search.router)
# Health router does not require API key authentication
app.include_router(health.router)


@app.exception_handler(ProductNotFound)
async def product_not_found_handler(request: Request, exc: ProductNotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(InvalidPageSize)
async def invalid_page_size_handler(request: Request, exc: InvalidPageSize):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(BackendFailure)
async def backend_failure_handler(request: Request, exc: BackendFailure):
    logger.error(f"Search backend failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": f"Search backend unavailable: {exc}"}
    )


@app.get("/api-stats", tags=["Monitoring"], dependencies=[Depends(get_api_key)])
async def api_stats():
    """Get API usage statistics and metrics"""
    return {
        "search_metrics": {
            "average_processing_time_ms": SearchMetrics.get_average_processing_time(),
            "popular_queries": SearchMetrics.get_popular_queries(),
            "recent_searches": SearchMetrics.get_recent_searches(10)
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
