"""Sync orchestration."""

from .service import SyncService, run_sync

__all__ = [
    "SyncService",
    "run_sync",
]
