"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.responses import JSONResponse

from src.shop.api.http.app_data import ApplicationDependencies
from src.shop.api.http.errors import INTERNAL_ERROR_MESSAGE, register_exception_handlers
from src.shop.api.http.routers.health import router as health_router
from src.shop.api.http.routers.service.category import router as category_router
from src.shop.api.http.routers.service.product import router as product_router
from src.shop.api.utils.app_startup import configure_logging
from src.shop.core.services import DbManageService, DbSessionService
from src.shop.core.services.product_service import ProductService
from src.shop.core.storage import FileSystemAssetStorage
from src.shop.entities.service.category import SqlCategoryStore
from src.shop.entities.service.product import SqlProductStore
from src.shop.runtime.context import get_config

configure_logging()


def build_dependencies() -> ApplicationDependencies:
    """Assemble the production stores and storage from configuration."""
    config = get_config()

    database_service = DbSessionService()
    if config.database.create_tables:
        DbManageService(database_service.engine).create_all()

    asset_storage = FileSystemAssetStorage(config.assets)
    product_store = SqlProductStore(database_service)
    return ApplicationDependencies(
        product_store=product_store,
        category_store=SqlCategoryStore(database_service),
        asset_storage=asset_storage,
        product_service=ProductService(product_store, asset_storage),
        database_service=database_service,
    )


async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
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
                content={"message": INTERNAL_ERROR_MESSAGE},
                headers={"X-Request-ID": request_id},
            )


def create_app(dependencies: ApplicationDependencies | None = None) -> FastAPI:
    """Create the application.

    Args:
        dependencies: Pre-built stores and storage. When omitted they are
            built from configuration at startup and disposed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = dependencies is None
        deps = build_dependencies() if owned else dependencies
        app.state.app_dependencies = deps
        logger.info("Starting up application in {} environment", get_config().app.environment)
        try:
            yield
        finally:
            logger.info("Shutting down application")
            if owned and deps.database_service is not None:
                deps.database_service.dispose()

    config = get_config()
    if config.app.environment == "production" and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    app = FastAPI(
        title="Shop API",
        lifespan=lifespan,
        docs_url=None if config.app.environment == "production" else "/docs",
        redoc_url=None if config.app.environment == "production" else "/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )
    app.middleware("http")(log_requests)
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(product_router)
    app.include_router(category_router)
    return app


app = create_app()

__all__ = ["app", "create_app", "build_dependencies"]


if __name__ == "__main__":
    import uvicorn

    main_config = get_config()
    uvicorn.run(
        app,
        host=main_config.app.host,
        port=main_config.app.port,
        access_log=False,  # We handle access logging in middleware
    )
