import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request

from .api import info, load, websockets
from .config import Settings
from .core.events.storage_events import StorageLoadUpdatedEvent
from .dependencies import (
    get_event_bus,
    get_settings,
    get_storage_load_monitor,
    get_websocket_manager,
)
from .logging_config import setup_logging
from .services.storage.layout_loader import load_storage_layout


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings = get_settings()
    setup_logging(settings)

    config_info = settings.config_file_info
    logging.info(f"Configuration loaded from: {config_info['active_config_file']}")
    logging.info(f"Running on hostname: {config_info['hostname']}")
    logging.info(
        f"SMART polling {'enabled' if settings.enable_smart_temps else 'disabled'}, "
        f"fs type filter: {', '.join(sorted(settings.fs_type_filter))}"
    )

    # Static layout is read once and never changes while running
    monitor = get_storage_load_monitor()
    monitor.set_layout(await load_storage_layout(settings.storage_layout_file))

    websocket_manager = get_websocket_manager()
    websocket_manager.start_sender_task()

    if settings.enable_storage_widget:
        await get_event_bus().subscribe(
            StorageLoadUpdatedEvent, websocket_manager.handle_storage_load_updated
        )
        await monitor.start_monitoring()
    else:
        # Nothing is polled or pushed while the storage widget is disabled
        logging.info("Storage widget disabled - storage load polling not started")

    yield

    logging.info("Storage telemetry shutting down...")
    await monitor.stop_monitoring()
    await websocket_manager.stop_sender_task()
    logging.info("Alle background tasks stoppet")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Storage Telemetry",
        description="Storage load and SMART health telemetry with legacy and extended payloads",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logging.debug(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "operation": "http_request",
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        return response

    app.include_router(websockets.router, prefix=settings.routing_path)
    if not settings.disable_integrations:
        app.include_router(load.router, prefix=settings.routing_path)
        app.include_router(info.router, prefix=settings.routing_path)
    else:
        logging.info("Integrations disabled - /load, /info and /config are not served")

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": "storage-telemetry"}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "storage_telemetry.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    run()
