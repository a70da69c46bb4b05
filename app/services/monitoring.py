import logging
import time
from collections import Counter, deque
from typing import Any, Callable, Deque, Dict, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class APIMonitoringMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with its status and duration and reports the
    duration in the X-Process-Time header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {method} {path} | Client: {client_host} | "
                f"Error: {e} | Time: {process_time:.4f}s"
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"Request: {method} {path} | Client: {client_host} | "
            f"Status: {response.status_code} | Time: {process_time:.4f}s"
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response


class SearchMetrics:
    """
    In-process record of recent searches, exposed through /api-stats
    """
    _max_stored_queries = 1000
    _searches: Deque[Dict[str, Any]] = deque(maxlen=_max_stored_queries)

    @classmethod
    def record_search(cls, operation: str, query: Optional[str], filters: Optional[Dict[str, Any]],
                      results_count: int, processing_time_ms: int) -> None:
        cls._searches.append({
            "timestamp": time.time(),
            "operation": operation,
            "query": query,
            "filters": filters or {},
            "results_count": results_count,
            "processing_time_ms": processing_time_ms
        })

    @classmethod
    def get_recent_searches(cls, limit: int = 50) -> List[Dict[str, Any]]:
        return list(cls._searches)[-limit:]

    @classmethod
    def get_average_processing_time(cls, last_n: int = 100) -> float:
        recent = list(cls._searches)[-last_n:]
        if not recent:
            return 0.0
        return sum(s["processing_time_ms"] for s in recent) / len(recent)

    @classmethod
    def get_popular_queries(cls, limit: int = 10) -> List[Dict[str, Any]]:
        counts = Counter(s["query"] for s in cls._searches if s["query"])
        return [{"query": q, "count": c} for q, c in counts.most_common(limit)]

    @classmethod
    def reset(cls) -> None:
        cls._searches.clear()
