"""FastAPI app factory: error-page handler, health and metrics endpoints."""
from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response

from .api import router as api_router
from .api.headers import REQUEST_ID
from .config import Settings, load_settings
from .logging_conf import get_logger, setup_logging
from .metrics import RequestMetrics
from .service.error_pages import load_default_format

setup_logging()
logger = get_logger("app")


def create_app(settings: Settings | None = None, metrics: RequestMetrics | None = None) -> FastAPI:
    """Build the application.

    Raises:
        ConfigurationError: if the default response format cannot be mapped to
            a file extension. The process must not start serving in that state.
    """
    settings = settings or load_settings()
    metrics = metrics or RequestMetrics()
    default_format = load_default_format(settings.default_response_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if not settings.error_files_path.is_dir():
            logger.warning(
                "pages.dir_missing",
                extra={"event": "pages_dir_missing", "path": str(settings.error_files_path)},
            )
        logger.info(
            "startup",
            extra={
                "event": "startup",
                "error_files_path": str(settings.error_files_path),
                "default_format": default_format.media_type,
                "debug": settings.debug,
            },
        )
        yield
        logger.info("shutdown", extra={"event": "shutdown"})

    app = FastAPI(
        title="Default Error Backend",
        version=settings.app_version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.metrics = metrics
    app.state.default_format = default_format

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """Log start/end of every request, correlated by the proxy's X-Request-ID."""
        request_id = request.headers.get(REQUEST_ID) or str(uuid4())

        start = time.perf_counter()
        logger.debug(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "method": request.method,
                    "path": request.url.path,
                    "request_id": request_id,
                },
            )
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        logger.info(
            "request.end",
            extra={
                "event": "request_end",
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    app.include_router(api_router)

    return app


# ASGI entrypoint for uvicorn: `uvicorn error_backend.main:app --port 8080`
app = create_app()
