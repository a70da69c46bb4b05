import json
import logging
from typing import Any, Dict, Optional

import config


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once for the whole application
    """
    logging.basicConfig(
        level=level or config.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


logger = logging.getLogger(__name__)


def log_search_query(operation: str, filters: Optional[Dict[str, Any]] = None) -> None:
    """
    Log search requests for later analysis
    """
    logger.debug(f"Search [{operation}] - Filters: {json.dumps(filters or {}, default=str)}")
