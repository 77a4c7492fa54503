"""Smart Restore - FastAPI Application.

This module defines the application factory, all routes, and the ``main()``
CLI function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :mod:`smartrestore.core.config`.
- **Restoration** is delegated to
  :class:`~smartrestore.core.lifecycle.UploadLifecycleManager`, which calls
  the Gemini model through an injected
  :class:`~smartrestore.core.invoker.Invoker`.
- **Cleanup** of stale uploads and results runs on a
  :class:`~smartrestore.core.sweeper.PeriodicSweep` started by the lifespan.
- **Restored images** are served read-only under ``/results``; frontend
  assets under ``/static``.
- **History** lives only in the user's browser; the server keeps nothing
  once the sweep has run.

Endpoints
---------
========  ==================  ===========================================
Method    Path                Purpose
========  ==================  ===========================================
GET       ``/``               Serve the main HTML page
GET       ``/api/config``     Modes, upload limits, history capacity
GET       ``/api/health``     Liveness probe
POST      ``/api/restore``    Restore an uploaded photo
========  ==================  ===========================================

Usage
-----
CLI (installed entry point)::

    smartrestore

Direct invocation::

    python -m smartrestore.api.main
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from smartrestore import __version__
from smartrestore.api.models import ClientConfig, ModeOption, RestoreResponse
from smartrestore.api.validation import ALLOWED_CONTENT_TYPES, validate_upload
from smartrestore.core.config import SmartRestoreConfig, config
from smartrestore.core.errors import (
    ConfigurationError,
    FilesystemError,
    ProviderError,
    RestorationError,
    UploadValidationError,
)
from smartrestore.core.file_store import FileStore
from smartrestore.core.invoker import GeminiInvoker, Invoker
from smartrestore.core.lifecycle import UploadLifecycleManager
from smartrestore.core.prompt_builder import available_modes
from smartrestore.core.sweeper import FileSweeper, PeriodicSweep

logger = logging.getLogger(__name__)

RESULTS_URL_PREFIX = "/results"
_PROCESSING_FAILED = "Failed to process image"


def _error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    """Build the ``{"error": ..., "details": ...}`` body used by every failure."""
    body: dict = {"error": error}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def create_app(
    settings: SmartRestoreConfig = config,
    invoker: Invoker | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration to run with.
        invoker: Restoration capability.  When omitted, a
            :class:`GeminiInvoker` is built at startup from
            ``settings.gemini_api_key``.

    Returns:
        The configured application.  Stores, the lifecycle manager and the
        sweep are created by the lifespan and kept on ``app.state``.
    """
    uploads = FileStore(settings.uploads_dir)
    results = FileStore(settings.results_dir, url_prefix=RESULTS_URL_PREFIX)
    uploads.ensure()
    results.ensure()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Wire the core components on startup and stop the sweep on shutdown.

        Raises:
            ConfigurationError: If no invoker was injected and the Gemini API
                key is missing.
        """
        # --- Startup -----------------------------------------------------------
        active_invoker = invoker
        if active_invoker is None:
            if not settings.gemini_api_key:
                raise ConfigurationError(
                    "GEMINI_API_KEY is not set; the restoration service cannot start"
                )
            active_invoker = GeminiInvoker.from_config(settings)

        app.state.settings = settings
        app.state.lifecycle = UploadLifecycleManager(active_invoker, uploads, results)
        app.state.sweep = PeriodicSweep(
            FileSweeper([uploads, results], settings.file_max_age_seconds),
            settings.sweep_interval_seconds,
        )
        app.state.sweep.start()
        logger.info("Restoration service ready (model=%s).", settings.gemini_model)

        yield  # Application runs here.

        # --- Shutdown ----------------------------------------------------------
        await app.state.sweep.stop()
        logger.info("File sweep stopped on shutdown.")

    app = FastAPI(
        title="Smart Restore",
        description="Remove overlays and artifacts from photos with a generative model.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")
    app.mount(
        RESULTS_URL_PREFIX,
        StaticFiles(directory=str(settings.results_dir)),
        name="results",
    )

    # -----------------------------------------------------------------------
    # Error translation.
    # -----------------------------------------------------------------------

    @app.exception_handler(UploadValidationError)
    async def _validation_failed(request: Request, exc: UploadValidationError) -> JSONResponse:
        return _error_response(exc.status_code, str(exc))

    @app.exception_handler(ProviderError)
    async def _provider_failed(request: Request, exc: ProviderError) -> JSONResponse:
        logger.error("Error processing request: %s", exc)
        return _error_response(502, _PROCESSING_FAILED, str(exc))

    @app.exception_handler(FilesystemError)
    async def _filesystem_failed(request: Request, exc: FilesystemError) -> JSONResponse:
        logger.error("Error processing request: %s (cause: %r)", exc, exc.__cause__)
        return _error_response(500, _PROCESSING_FAILED, str(exc))

    @app.exception_handler(RestorationError)
    async def _restoration_failed(request: Request, exc: RestorationError) -> JSONResponse:
        logger.error("Error processing request: %s", exc)
        return _error_response(500, _PROCESSING_FAILED, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _malformed_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, "Malformed request", "; ".join(e["msg"] for e in exc.errors()))

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error processing request")
        return _error_response(500, _PROCESSING_FAILED)

    # -----------------------------------------------------------------------
    # Routes.
    # -----------------------------------------------------------------------

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        """Serve the single-page frontend.

        Raises:
            HTTPException: 404 if ``index.html`` is not found.
        """
        index_path = settings.templates_dir / "index.html"
        if index_path.exists():
            return HTMLResponse(content=index_path.read_text(encoding="utf-8"))
        raise HTTPException(status_code=404, detail="index.html not found")

    @app.get("/api/config", response_model=ClientConfig)
    async def get_config() -> ClientConfig:
        """Return what the frontend needs to render the mode picker and history."""
        return ClientConfig(
            version=__version__,
            modes=[ModeOption(**mode) for mode in available_modes()],
            maxUploadBytes=settings.max_upload_bytes,
            acceptedTypes=sorted(ALLOWED_CONTENT_TYPES),
            historyCapacity=settings.history_capacity,
        )

    @app.get("/api/health")
    async def health() -> dict:
        """Liveness probe."""
        return {"status": "ok"}

    @app.post("/api/restore", response_model=RestoreResponse)
    async def restore(
        request: Request,
        image: UploadFile | None = File(default=None),
        restoration_mode: str | None = Form(default=None, alias="restorationMode"),
    ) -> RestoreResponse:
        """Restore an uploaded photo.

        This endpoint:

        1. Validates the upload (presence, type, size) and the mode.
        2. Stages the upload in the temporary store.
        3. Restores it through the lifecycle manager, which always removes
           the staged file afterwards.
        4. Returns the public URL of the restored image.

        Raises:
            UploadValidationError: 400/413 for rejected uploads.
            ProviderError: 502 when the model fails or returns no image.
            FilesystemError: 500 when staging or saving fails.
        """
        data, mode = await validate_upload(
            image, restoration_mode, settings.max_upload_bytes
        )

        lifecycle: UploadLifecycleManager = request.app.state.lifecycle
        staged = lifecycle.stage_upload(data, image.filename)
        result = await lifecycle.restore(staged, mode)

        return RestoreResponse(
            imageUrl=result.url,
            restorationMode=mode,
            createdAt=int(time.time() * 1000),
        )

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Configure logging and launch the uvicorn ASGI server.

    Host and port come from :data:`~smartrestore.core.config.config`
    (``SMARTRESTORE_SERVER_HOST`` and ``SMARTRESTORE_SERVER_PORT`` or
    ``PORT``).  Registered as the ``smartrestore`` console script.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Server running on port %s", config.server_port)

    uvicorn.run(
        "smartrestore.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
