from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
import uvicorn
import logging
from contextlib import asynccontextmanager

from brightenroll.core.config import settings
from brightenroll.core.database import init_db, local_engine, cloud_engine, LocalSessionLocal, CloudSessionLocal
from brightenroll.core.logging_config import setup_logging
from brightenroll.api.v1 import sync
from brightenroll.services.connectivity import ConnectivityService
from brightenroll.services.sync import (
    AutoSyncScheduler,
    DatabaseSyncService,
    SyncState,
    SyncStatusService
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    # Initialize local database
    await init_db(local_engine)

    connectivity = ConnectivityService()
    status = SyncStatusService()
    connectivity.add_listener(status.set_online)
    await connectivity.start_monitoring()
    status.set_online(connectivity.is_connected)

    sync_service = DatabaseSyncService(
        LocalSessionLocal,
        CloudSessionLocal,
        connectivity,
        state=SyncState(),
        status=status
    )
    scheduler = AutoSyncScheduler(sync_service, connectivity, status)

    app.state.connectivity = connectivity
    app.state.sync_status = status
    app.state.sync_service = sync_service
    app.state.sync_scheduler = scheduler

    # Cloud tables are created by the first sync attempt that reaches the cloud
    if connectivity.is_connected:
        # Fresh installation: bootstrap the local store from the cloud
        if await sync_service.is_local_database_empty():
            logger.info("Local database is empty, pulling data from cloud")
            result = await sync_service.try_sync_from_cloud()
            logger.info(f"Initial cloud bootstrap: {result.message}")

    if settings.AUTO_SYNC_ENABLED:
        await scheduler.start()

    yield

    await scheduler.stop()
    await connectivity.stop_monitoring()
    await local_engine.dispose()
    await cloud_engine.dispose()


app = FastAPI(
    title="BrightEnroll Sync API",
    description="Local/cloud database synchronization for BrightEnroll",
    version="1.0.0",
    lifespan=lifespan
)

# Include API routers
app.include_router(sync.router, prefix="/api/v1/sync", tags=["sync"])


@app.get("/")
async def root():
    return {"message": "BrightEnroll Sync API", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": "1.0.0"}


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "status_code": exc.status_code}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "status_code": 500}
    )


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info" if not settings.DEBUG else "debug"
    )
