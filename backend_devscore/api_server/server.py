"""
FastAPI server — dev reputation API.

Mounts the /dev router, exposes /health and the admin batch refresh, and maps
domain errors to the {"success": false, "error": {...}} envelope. The lifespan
starts the periodic stale-score refresher in a background thread unless
SCORE_SCHEDULER_ENABLED is off.

Run: uvicorn backend_devscore.api_server.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import threading
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend_devscore.agent_worker.runner import (
    SHUTDOWN_JOIN_TIMEOUT_SEC,
    PeriodicRunnerConfig,
    run_periodic_worker,
    update_all_dev_scores,
)
from backend_devscore.api_server.deps import get_app_storage, require_admin
from backend_devscore.api_server.dev_routes import router as dev_router
from backend_devscore.api_server.schemas import MessageResponse
from backend_devscore.config import Settings
from backend_devscore.core.exceptions import DevNotFoundError, DevScoreError
from backend_devscore.database import StorageHandle
from backend_devscore.devscore_logging import configure_structlog, get_logger

logger = get_logger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"code": code, "message": message}},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the periodic refresher thread; signal stop and join on shutdown."""
    settings: Settings = app.state.settings
    stop_event = threading.Event()
    thread: threading.Thread | None = None
    if settings.scheduler_enabled:
        if app.state.storage is None:
            from backend_devscore.database import get_storage

            app.state.storage = get_storage(settings.database_url)
        config = PeriodicRunnerConfig(
            interval_sec=float(settings.refresh_interval_sec),
            stale_after_sec=settings.stale_after_sec,
            batch_limit=settings.refresh_batch_limit,
        )
        thread = threading.Thread(
            target=run_periodic_worker,
            args=(app.state.storage, config, stop_event),
            name="dev-score-refresher",
            daemon=True,
        )
        thread.start()
        logger.info("api_periodic_runner_started", interval_sec=config.interval_sec)
    try:
        yield
    finally:
        stop_event.set()
        if thread is not None:
            thread.join(timeout=SHUTDOWN_JOIN_TIMEOUT_SEC)
            logger.info("api_periodic_runner_stopped", alive=thread.is_alive())


def create_app(
    storage: StorageHandle | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the API. storage and settings default to the environment
    (DATABASE_URL / DEVSCORE_DB_PATH, ADMIN_API_KEY, SCORE_* vars).
    """
    if settings is None:
        from backend_devscore.config import get_settings

        settings = get_settings()
    configure_structlog(settings.log_format, settings.log_level)

    app = FastAPI(title="DevScore API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage

    @app.exception_handler(DevNotFoundError)
    async def _dev_not_found(request: Request, exc: DevNotFoundError) -> JSONResponse:
        return _error_response(404, exc.code, "Dev not found")

    @app.exception_handler(DevScoreError)
    async def _dev_score_error(request: Request, exc: DevScoreError) -> JSONResponse:
        logger.warning("api_domain_error", code=exc.code, error=str(exc), path=request.url.path)
        return _error_response(400, exc.code, str(exc))

    # Registered on Starlette's base class so router 404/405 get the envelope too
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail: Any = exc.detail
        if isinstance(detail, dict) and "code" in detail:
            return _error_response(exc.status_code, detail["code"], detail.get("message", ""))
        if exc.status_code == 404:
            return _error_response(404, "NOT_FOUND", str(detail))
        return _error_response(exc.status_code, "HTTP_ERROR", str(detail))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("query", "path", "body"))
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "invalid request")
        logger.debug("api_validation_error", path=request.url.path, errors=len(errors))
        return _error_response(422, "VALIDATION_ERROR", message)

    @app.get("/health")
    def health(storage: StorageHandle = Depends(get_app_storage)) -> JSONResponse:
        try:
            storage.first("SELECT 1 AS ok")
        except Exception as e:
            logger.error("health_db_unavailable", error=str(e))
            return JSONResponse(status_code=503, content={"status": "degraded", "database": "unavailable"})
        return JSONResponse(content={"status": "ok", "database": "ok"})

    @app.post(
        "/admin/dev-scores/refresh",
        response_model=MessageResponse,
        dependencies=[Depends(require_admin)],
    )
    def refresh_all_dev_scores(storage: StorageHandle = Depends(get_app_storage)) -> MessageResponse:
        update_all_dev_scores(storage)
        return MessageResponse(data={"refreshed": True})

    app.include_router(dev_router)
    return app


app = create_app()
