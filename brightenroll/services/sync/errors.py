"""
Exceptions raised by the synchronization service.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for synchronization errors."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception


class TableSyncError(SyncError):
    """A persistence failure while copying one table between stores."""

    def __init__(self, table: str, direction: str, original_exception: Exception):
        super().__init__(
            f"Failed to sync table {table} ({direction}): {original_exception}",
            original_exception=original_exception
        )
        self.table = table
        self.direction = direction
