"""FastAPI application with lifespan, health and sync endpoints."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from schedule_hub.api.dependencies import get_services, verify_scheduler
from schedule_hub.api.router import router as schedules_router
from schedule_hub.config import get_settings
from schedule_hub.container import AppServices, build_services
from schedule_hub.ingestion.pipeline import SyncResult
from schedule_hub.logging_config import configure_logging
from schedule_hub.store.errors import StoreError, StoreErrorKind

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, open the store and run the background loops."""
    settings = get_settings()
    configure_logging(settings.log_level)
    services = build_services(settings)
    app.state.settings = settings
    app.state.services = services

    services.scheduler.start()
    sync_task = asyncio.create_task(
        services.pipeline.run_periodic(settings.sync_interval_seconds)
    )
    try:
        yield
    finally:
        services.pipeline.stop()
        await services.scheduler.stop()
        await sync_task
        services.store.dispose()


app = FastAPI(
    title="Schedule Hub",
    lifespan=lifespan,
)
app.include_router(schedules_router)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if exc.kind == StoreErrorKind.NOT_FOUND:
        return JSONResponse({"detail": "Not found"}, status_code=404)
    logger.error("Store error on %s: %s", request.url.path, exc)
    return JSONResponse({"detail": f"Storage failure ({exc.kind.value})"}, status_code=500)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "schedule-hub",
        "version": "0.1.0",
    }


@app.post("/sync")
async def sync_endpoint(
    _: None = Depends(verify_scheduler),
    services: AppServices = Depends(get_services),
) -> SyncResult:
    """Trigger one ingestion pass across every enabled workspace."""
    return await services.pipeline.sync()
