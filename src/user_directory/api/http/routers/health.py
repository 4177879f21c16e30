"""Health check endpoint for monitoring service availability."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from src.user_directory.api.http.app_data import ApplicationDependencies
from src.user_directory.api.http.deps import get_app_dependencies

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(
    app_deps: Annotated[ApplicationDependencies, Depends(get_app_dependencies)],
) -> dict[str, Any]:
    """Database and cache availability.

    The cache is not critical: when it is down searches are computed
    directly, so only the database decides between healthy and unhealthy.
    """
    db_healthy = app_deps.database_service.health_check()
    checks: dict[str, Any] = {
        "database": {"status": "healthy" if db_healthy else "unhealthy"},
    }

    if app_deps.cache is None:
        checks["cache"] = {"status": "disabled"}
    else:
        cache_info = app_deps.cache.describe()
        checks["cache"] = {
            "status": "healthy" if cache_info["available"] else "degraded",
            **cache_info,
        }

    if app_deps.redis_service is not None and app_deps.redis_service.is_enabled:
        redis_healthy = await app_deps.redis_service.health_check()
        checks["redis"] = {"status": "healthy" if redis_healthy else "degraded"}

    return {"status": "healthy" if db_healthy else "unhealthy", "checks": checks}
