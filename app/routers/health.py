import logging
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends

import config
from database.mongodb import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=Dict[str, Any])
async def health_check(db=Depends(get_db)):
    """
    Health check endpoint for monitoring system status.
    Verifies the database connection and reports which search backend is active.
    Does not require API key authentication.
    """
    start_time = time.time()

    health_info = {
        "status": "healthy",
        "service": "Product Search API",
        "timestamp": time.time(),
        "version": config.APP_VERSION,
        "search_backend": "local" if config.TEST_MODE else "atlas",
        "services": {}
    }

    try:
        await db.command("ping")
        health_info["database_connection"] = "ok"

        try:
            count = await db[config.PRODUCT_COLLECTION].count_documents({})
            health_info["services"]["mongodb"] = {
                "status": "healthy",
                "collections": {config.PRODUCT_COLLECTION: {"count": count}}
            }
        except Exception as e:
            # Collection stats are not critical for health check
            logger.warning(f"Collection stats unavailable: {e}")
            health_info["services"]["mongodb"] = {
                "status": "healthy",
                "collections_stats": "unavailable"
            }

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        health_info["status"] = "unhealthy"
        health_info["database_connection"] = f"error: {str(e)}"

    health_info["response_time_ms"] = round((time.time() - start_time) * 1000, 2)

    return health_info
