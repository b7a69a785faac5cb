"""FastAPI application factory."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import Settings, settings as default_settings
from ..exceptions import (
    BackendFailure,
    Busy,
    InvalidInput,
    InvalidParameters,
    ProcessingFailure,
    RasterFxError,
    UnreadableImage,
)
from ..selector import BackendSelector, default_backends
from ..worker_pool import WorkerPool
from .router import router

logger = logging.getLogger(__name__)

# Checked in order, so subclasses must precede their bases
STATUS_CODES: list[tuple[type[RasterFxError], int]] = [
    (InvalidInput, 400),
    (InvalidParameters, 422),
    (UnreadableImage, 415),
    (Busy, 503),
    (ProcessingFailure, 408),
    (BackendFailure, 500),
]


def status_for(exc: RasterFxError) -> int:
    for error_type, status in STATUS_CODES:
        if isinstance(exc, error_type):
            return status
    return 500


def error_body(exc: RasterFxError) -> dict:
    error = {"code": exc.code, "message": str(exc)}
    if isinstance(exc, InvalidParameters):
        error["field"] = exc.field
        error["accepted"] = exc.accepted
    return {"success": False, "error": error}


def create_api_app(
    settings: Optional[Settings] = None,
    selector: Optional[BackendSelector] = None,
    pool: Optional[WorkerPool] = None,
) -> FastAPI:
    """Create the rasterfx API application.

    Mount it at ``/api`` in a host app, or serve it directly:

        app = FastAPI()
        app.mount("/api", create_api_app())

    Args:
        settings: Configuration, defaults to the module-level settings
        selector: Backend chain, defaults to :func:`default_backends`
        pool: Worker pool, defaults to one sized from settings
    """
    settings = settings or default_settings
    if settings.LOG_LEVEL:
        logging.basicConfig(
            level=settings.LOG_LEVEL.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    api = FastAPI(title="rasterfx API", docs_url="/docs")
    api.state.settings = settings
    api.state.selector = selector or BackendSelector(default_backends(settings.ENABLE_NATIVE_BACKEND))
    api.state.pool = pool or WorkerPool(
        settings.WORKERS, settings.QUEUE_DEPTH, settings.PROCESSING_TIMEOUT
    )

    @api.exception_handler(RasterFxError)
    async def rasterfx_error_handler(request: Request, exc: RasterFxError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.error(f"{request.url.path}: {exc}")
        else:
            logger.info(f"{request.url.path} rejected ({status}): {exc}")
        return JSONResponse(status_code=status, content=error_body(exc))

    @api.on_event("shutdown")
    async def shutdown_event():
        """Stop the worker pool on shutdown."""
        api.state.pool.shutdown(wait=False)

    api.include_router(router)
    return api
