"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.shop.api.http.deps import get_database_service
from src.shop.core.services import DbSessionService
from src.shop.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 OK as long as the process is running."""
    return {"status": "healthy", "service": "shop-api"}


@router.get("/ready", response_model=None)
def readiness(
    database_service: DbSessionService | None = Depends(get_database_service),
) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 200 when the database answers, 503 otherwise."""
    config = get_config()
    checks: dict[str, Any] = {}

    if database_service is None:
        checks["database"] = {"status": "disabled"}
        all_healthy = True
    else:
        all_healthy = database_service.health_check()
        checks["database"] = {
            "status": "healthy" if all_healthy else "unhealthy",
            "type": database_service.engine.dialect.name,
            "pool": database_service.get_pool_status(),
        }

    body = {
        "status": "ready" if all_healthy else "not_ready",
        "environment": config.app.environment,
        "checks": checks,
    }
    if not all_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
