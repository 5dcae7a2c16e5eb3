"""
API endpoints for local/cloud database sync
"""

from fastapi import APIRouter, Depends, Query, Request
from datetime import datetime
from typing import Optional
import logging

from brightenroll.services.sync import DatabaseSyncService, SyncStatusService
from brightenroll.schemas.sync import (
    SyncResultResponse,
    SyncStatusResponse,
    LocalDatabaseStateResponse
)

logger = logging.getLogger(__name__)
router = APIRouter()


def get_sync_service(request: Request) -> DatabaseSyncService:
    return request.app.state.sync_service


def get_sync_status(request: Request) -> SyncStatusService:
    return request.app.state.sync_status


@router.get("/status", response_model=SyncStatusResponse)
async def get_status(status: SyncStatusService = Depends(get_sync_status)):
    """Current online/syncing state, last sync time and recent errors"""
    return SyncStatusResponse.from_status(status)


@router.get("/local-empty", response_model=LocalDatabaseStateResponse)
async def local_database_state(sync_service: DatabaseSyncService = Depends(get_sync_service)):
    """Whether the local store needs an initial pull from the cloud"""
    return LocalDatabaseStateResponse(is_empty=await sync_service.is_local_database_empty())


@router.post("/push", response_model=SyncResultResponse)
async def push_to_cloud(sync_service: DatabaseSyncService = Depends(get_sync_service)):
    """Copy every local row to the cloud store"""
    result = await sync_service.try_sync_to_cloud()
    logger.info(f"Manual push finished: {result.outcome.value}")
    return SyncResultResponse.from_result(result)


@router.post("/pull", response_model=SyncResultResponse)
async def pull_from_cloud(sync_service: DatabaseSyncService = Depends(get_sync_service)):
    """Copy every cloud row into the local store"""
    result = await sync_service.try_sync_from_cloud()
    logger.info(f"Manual pull finished: {result.outcome.value}")
    return SyncResultResponse.from_result(result)


@router.post("/full", response_model=SyncResultResponse)
async def full_sync(sync_service: DatabaseSyncService = Depends(get_sync_service)):
    """Push local changes, then pull cloud changes"""
    result = await sync_service.full_sync()
    return SyncResultResponse.from_result(result)


@router.post("/incremental", response_model=SyncResultResponse)
async def incremental_sync(
    since: Optional[datetime] = Query(default=None, description="Only sync rows modified at or after this time"),
    sync_service: DatabaseSyncService = Depends(get_sync_service)
):
    """Push then pull recently modified rows"""
    result = await sync_service.incremental_sync(since=since)
    return SyncResultResponse.from_result(result)
