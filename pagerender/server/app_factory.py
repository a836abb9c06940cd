"""Application factory wiring the renderer into FastAPI."""

from __future__ import annotations

import logging
import os
import signal

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from pagerender.config import Settings, get_settings
from pagerender.render.monitoring import init_monitoring
from pagerender.render.renderer import AppRenderer
from pagerender.utils.logger import clear_request_context, generate_request_id, set_request_context, setup_logging


REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger(__name__)


def request_shutdown(code: int, err: BaseException | None) -> None:
    """Ask the server for a graceful shutdown after a fatal status."""
    logger.critical(
        "Shutting down after fatal status",
        extra={"status_code": code, "error": str(err) if err is not None else ""},
    )
    os.kill(os.getpid(), signal.SIGTERM)


def get_renderer(request: Request) -> AppRenderer:
    """FastAPI dependency returning the app-wide renderer."""
    return request.app.state.renderer


def _install_error_handling(app: FastAPI, renderer: AppRenderer) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_exception(request: Request, exc: StarletteHTTPException) -> Response:
        response = renderer.serve_error(request, exc.status_code, exc, None)
        for key, value in (exc.headers or {}).items():
            response.headers[key] = value
        return response

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> Response:
        return renderer.serve_error(request, 422, exc, None)

    @app.middleware("http")
    async def _request_context(request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        set_request_context(request_id=request_id)
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.exception("Unhandled error while serving request")
                response = renderer.serve_error(request, 500, exc, None)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_context()


def create_app(settings: Settings | None = None, renderer: AppRenderer | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Route handlers obtain the renderer through ``Depends(get_renderer)``
    and return ``renderer.serve_page(...)`` directly.
    """
    settings = settings or get_settings()
    setup_logging(settings.logging)
    init_monitoring(settings.monitoring)

    if renderer is None:
        fatal_handler = request_shutdown if settings.errors.fatal_status_codes else None
        renderer = AppRenderer.from_settings(settings, fatal_handler=fatal_handler)

    logger.info(
        "Renderer config loaded",
        extra={
            "template_dir": renderer.template_dir,
            "asset_sources": len(renderer.asset_handler.sources),
            "fatal_status_codes": sorted(renderer.responder.fatal_status_codes),
        },
    )

    app = FastAPI(title="PageRender", version="0.2.0", debug=settings.server.debug)
    app.state.renderer = renderer

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    _install_error_handling(app, renderer)
    return app
