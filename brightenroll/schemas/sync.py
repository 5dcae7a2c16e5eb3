"""
Pydantic schemas for sync endpoints
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List, Optional

from brightenroll.services.sync.state import SyncResult, SyncOutcome, SyncDirection
from brightenroll.services.sync.status import SyncStatusService


class SyncResultResponse(BaseModel):
    """Outcome of one sync attempt"""
    direction: SyncDirection
    outcome: SyncOutcome
    success: bool
    records_pushed: int = 0
    records_pulled: int = 0
    tables_pushed: Dict[str, int] = Field(default_factory=dict)
    tables_pulled: Dict[str, int] = Field(default_factory=dict)
    message: str = ""
    error: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "direction": "to_cloud",
                "outcome": "success",
                "success": True,
                "records_pushed": 42,
                "records_pulled": 0,
                "tables_pushed": {"tbl_Users": 5, "tbl_Students": 37},
                "tables_pulled": {},
                "message": "to_cloud sync completed: 42 pushed, 0 pulled",
                "error": None,
                "started_at": "2024-06-01T08:00:00",
                "completed_at": "2024-06-01T08:00:03"
            }
        }

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResultResponse":
        return cls(
            direction=result.direction,
            outcome=result.outcome,
            success=result.success,
            records_pushed=result.records_pushed,
            records_pulled=result.records_pulled,
            tables_pushed=result.tables_pushed,
            tables_pulled=result.tables_pulled,
            message=result.message,
            error=str(result.error) if result.error else None,
            started_at=result.started_at,
            completed_at=result.completed_at
        )


class SyncStatusResponse(BaseModel):
    """Current sync status"""
    is_online: bool
    is_syncing: bool
    last_sync_time: Optional[datetime] = None
    pending_operations_count: int = 0
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def from_status(cls, status: SyncStatusService) -> "SyncStatusResponse":
        return cls(
            is_online=status.is_online,
            is_syncing=status.is_syncing,
            last_sync_time=status.last_sync_time,
            pending_operations_count=status.pending_operations_count,
            errors=status.errors
        )


class LocalDatabaseStateResponse(BaseModel):
    """Whether the local store still needs an initial cloud bootstrap"""
    is_empty: bool
