"""
Health check endpoint.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text

from shoplabel.api.dependencies import Services, get_services
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(response: Response, services: Services = Depends(get_services)) -> Dict[str, Any]:
    """
    Liveness plus database connectivity.

    Returns 503 when the database cannot be reached.
    """
    database = _check_database(services)
    healthy = database["status"] == "healthy"
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "shoplabel",
        "checks": {
            "database": database,
            "billing": {"configured": services.billing.configured},
        },
    }


def _check_database(services: Services) -> Dict[str, Any]:
    if services.engine is None:
        return {"status": "healthy", "backend": "memory"}

    try:
        start = datetime.now(timezone.utc)
        with services.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        elapsed = (datetime.now(timezone.utc) - start).total_seconds() * 1000
        return {"status": "healthy", "response_time_ms": round(elapsed, 2)}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}
