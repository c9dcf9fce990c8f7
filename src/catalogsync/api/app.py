"""FastAPI application factory for the sync service."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalogsync.core.errors import CoreError
from catalogsync.core.logging import configure_logging
from catalogsync.core.middleware import RequestContextMiddleware, metrics_response
from catalogsync.core.telemetry import (
    init_tracing,
    instrument_fastapi_app,
    is_tracing_enabled,
)

from .dependencies import close_sync_pipeline, get_settings
from .routers import sync

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    configure_logging(settings.log_level)
    init_tracing(settings.telemetry)
    if is_tracing_enabled():
        logger.info("tracing active", extra={"service_name": settings.telemetry.service_name})

    app = FastAPI(title="Catalog Sync Service", version=settings.app_version)

    instrument_fastapi_app(app)
    app.add_middleware(RequestContextMiddleware, service_name="catalogsync")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.exception_handler(CoreError)
    async def core_error_handler(_: Request, exc: CoreError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics")
    async def metrics() -> Response:
        return metrics_response()

    app.include_router(sync.router)

    @app.on_event("shutdown")
    async def shutdown_pipeline() -> None:
        await close_sync_pipeline()

    return app


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "catalogsync.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
