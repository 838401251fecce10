"""
Utils Module
Logging and error types
"""
from .logger import setup_logger, configure_logging
from .exceptions import (
    SyncAppError,
    ConfigurationError,
    ScraperError,
    LLMError,
    EnrichmentError,
    StoreError,
    EntryNotFoundError,
    VersionConflictError,
    ContentDecodeError,
    SyncError,
)

__all__ = [
    "setup_logger",
    "configure_logging",
    "SyncAppError",
    "ConfigurationError",
    "ScraperError",
    "LLMError",
    "EnrichmentError",
    "StoreError",
    "EntryNotFoundError",
    "VersionConflictError",
    "ContentDecodeError",
    "SyncError",
]
