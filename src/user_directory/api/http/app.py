"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.responses import JSONResponse

from src.user_directory.api.http.app_data import (
    ApplicationDependencies,
    build_dependencies,
)
from src.user_directory.api.http.routers import dashboard, health, notifications, users
from src.user_directory.api.utils.app_startup import configure_logging
from src.user_directory.core.exceptions import (
    DirectoryError,
    OutcomeKind,
    ValidationFailedError,
)
from src.user_directory.runtime.context import get_config

OUTCOME_STATUS = {
    OutcomeKind.VALIDATION_FAILED: 422,
    OutcomeKind.NOT_FOUND: 404,
    OutcomeKind.TRANSIENT_FAILURE: 503,
}


async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    status_code = OUTCOME_STATUS[exc.outcome]
    content: dict = {"message": exc.message, "code": exc.code}
    if isinstance(exc, ValidationFailedError):
        content["errors"] = exc.errors

    logger.bind(status_code=status_code, error_type=type(exc).__name__).warning(
        "request.failed: {}", exc.message
    )
    return JSONResponse(status_code=status_code, content=content)


async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    client_ip = request.client.host if request.client else "unknown"

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


def create_app(dependencies: ApplicationDependencies | None = None) -> FastAPI:
    """Build the API application.

    Args:
        dependencies: Prebuilt service graph, mainly for tests. When omitted,
            logging is configured and services are built from config at startup.
    """
    config = get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "app_dependencies", None) is None:
            configure_logging(config)
            logger.info(
                "Starting up application in {} environment", config.app.environment
            )
            owned = await build_dependencies(config)
            app.state.app_dependencies = owned
        try:
            yield
        finally:
            if owned is not None:
                logger.info("Shutting down application")
                await owned.close()

    is_production = config.app.environment == "production"
    app = FastAPI(
        title="User Directory",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    app.state.app_dependencies = dependencies

    if is_production and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )
    app.middleware("http")(log_requests)
    app.add_exception_handler(DirectoryError, directory_error_handler)

    app.include_router(health.router)
    app.include_router(dashboard.router)
    app.include_router(users.router)
    app.include_router(notifications.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
