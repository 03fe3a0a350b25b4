"""
Health Check Endpoints.

Provides liveness and readiness checks.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (database reachable)
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from diary.backend.core.logging import get_logger
from diary.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_database(request: Request) -> dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    database = getattr(request.app.state, "database", None)
    if database is None:
        return {"status": "not_configured"}

    try:
        start = utc_now()
        async with database.session() as session:
            await session.execute(text("SELECT 1"))

        latency_ms = int((utc_now() - start).total_seconds() * 1000)

        return {
            "status": "healthy",
            "latency_ms": latency_ms,
        }

    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {
            "status": "unhealthy",
            "error": str(e),
        }


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running.
    No dependency checks - this endpoint should always respond quickly.
    """
    return {"status": "healthy"}


@router.get("/health/ready", response_model=None)
async def readiness_check(request: Request) -> dict[str, Any] | JSONResponse:
    """
    Readiness check.

    Returns 200 if ready to serve traffic, 503 if the database is
    unreachable or does not answer within the configured timeout.
    """
    from diary.backend.core.config import get_app_config

    timeout = get_app_config().application.timeouts.database

    try:
        async with asyncio.timeout(timeout):
            db_result = await check_database(request)
    except TimeoutError:
        db_result = {"status": "unhealthy", "error": f"timed out after {timeout}s"}

    checks = {"database": db_result}
    body = {
        "status": "unhealthy" if db_result["status"] == "unhealthy" else "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }

    if body["status"] == "unhealthy":
        logger.warning("Readiness check failed", extra={"checks": checks})
        return JSONResponse(status_code=503, content=body)

    return body
