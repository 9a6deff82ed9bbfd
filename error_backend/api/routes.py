from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from ..config import Settings
from ..domain.formats import ResolvedFormat
from ..domain.pages import ErrorPage, iter_file
from ..logging_conf import get_logger
from ..metrics import CONTENT_TYPE_LATEST, RequestMetrics, protocol_label
from ..service import error_pages
from .headers import ACCEPT, CODE_HEADER, FORMAT_HEADER, debug_headers

router = APIRouter()
logger = get_logger("api")

_ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_metrics(request: Request) -> RequestMetrics:
    return request.app.state.metrics


def get_default_format(request: Request) -> ResolvedFormat:
    return request.app.state.default_format


def _bodiless(code: int) -> bool:
    return code in (204, 304)


def _apply_debug_echo(response: Response, echo: dict[str, str]) -> Response:
    """Copy the echoed headers onto `response` without losing its own Content-Type."""
    content_type = response.headers.get("content-type")
    response.headers.update(echo)
    if content_type is not None:
        response.headers["content-type"] = content_type
    return response


def _finish(page: ErrorPage | None, metrics: RequestMetrics, proto: str, started: float) -> None:
    """Runs once the response is sent: release the page handle, then record the request."""
    if page is not None:
        page.close()
    metrics.observe_since(proto, started)


def _page_response(page: ErrorPage, code: int, fmt: ResolvedFormat, done: BackgroundTask) -> Response:
    if _bodiless(code):
        response = Response(status_code=code, background=done)
    else:
        response = StreamingResponse(iter_file(page.handle), status_code=code, background=done)
    # Exactly the resolved media type; Starlette would otherwise append a charset.
    response.headers["content-type"] = fmt.media_type
    return response


@router.get("/healthz", summary="Liveness check")
async def healthz() -> JSONResponse:
    return JSONResponse(content={"ok": True})


@router.get("/metrics", summary="Prometheus metrics", include_in_schema=False)
async def metrics_endpoint(metrics: RequestMetrics = Depends(get_metrics)) -> Response:
    return Response(content=metrics.render(), media_type=CONTENT_TYPE_LATEST)


@router.api_route("/{full_path:path}", methods=_ANY_METHOD, include_in_schema=False)
def error_page(
    request: Request,
    settings: Settings = Depends(get_settings),
    metrics: RequestMetrics = Depends(get_metrics),
    default_format: ResolvedFormat = Depends(get_default_format),
) -> Response:
    """Serve the error page the proxy asked for via X-Code / X-Format / Accept.

    Runs in the threadpool: page lookup opens files with blocking I/O.
    """
    started = time.perf_counter()
    echo = debug_headers(request.headers) if settings.debug else {}

    fmt = error_pages.resolve_format(
        explicit=request.headers.get(FORMAT_HEADER),
        accept=request.headers.get(ACCEPT),
        default=default_format,
    )
    code = error_pages.resolve_code(request.headers.get(CODE_HEADER))

    proto = protocol_label(request.scope.get("http_version"))
    page = error_pages.find_page(root=settings.error_files_path, code=code, fmt=fmt)
    done = BackgroundTask(_finish, page, metrics, proto, started)

    if page is None:
        response: Response = PlainTextResponse("Not Found", status_code=404, background=done)
    else:
        response = _page_response(page, code, fmt, done)
    return _apply_debug_echo(response, echo)
