"""
Ping, liveness and readiness endpoints.
"""
from fastapi import APIRouter, Response
from fastapi.responses import PlainTextResponse

from chat.core.database import check_db_connection
from chat.core.logging import get_logger
from chat.schemas.message import HealthResponse

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/check",
    response_class=PlainTextResponse,
    summary="Ping",
)
async def check() -> str:
    """Plain-text ping."""
    return "ok"


@router.get(
    "/health/live",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Always returns 200 to indicate the service is alive."
)
async def liveness() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get(
    "/health/ready",
    response_model=HealthResponse,
    summary="Readiness probe",
    description="Returns 200 if the message store is reachable."
)
async def readiness(response: Response) -> HealthResponse:
    """
    Readiness probe - checks if the service can handle traffic.

    Checks:
    - the database answers a trivial query
    """
    db_ok = check_db_connection()
    checks = {"database": "ok" if db_ok else "failed"}

    if db_ok:
        return HealthResponse(status="ok", checks=checks)

    logger.warning("Readiness check failed: database not reachable")
    response.status_code = 503
    return HealthResponse(status="not ready", checks=checks)
