"""
Custom Exceptions
Error taxonomy for the sync pipeline
"""
from typing import Optional


class SyncAppError(Exception):
    """Base class for every error raised by the sync service."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(SyncAppError):
    """Missing or invalid configuration"""
    pass


class ScraperError(SyncAppError):
    """Upstream source API failure"""

    def __init__(self, message: str, source: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.source = source


class LLMError(SyncAppError):
    """LLM call failure"""

    RATE_LIMIT_MARKERS = ("429", "RESOURCE_EXHAUSTED")

    def __init__(self, message: str, provider: str = None, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        if self.status_code == 429:
            return True
        text = str(self)
        return any(marker in text for marker in self.RATE_LIMIT_MARKERS)


class EnrichmentError(SyncAppError):
    """Batch enrichment failed (fatal for the run)"""
    pass


class StoreError(SyncAppError):
    """Remote store returned a non-success response"""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = "", **kwargs):
        super().__init__(message, kwargs)
        self.status_code = status_code
        self.body = body

    def __str__(self):
        base = super().__str__()
        if self.status_code is not None:
            return f"{base} ({self.status_code}): {self.body}"
        return base


class EntryNotFoundError(StoreError):
    """Neither the entry id nor the section id resolved"""
    pass


class VersionConflictError(StoreError):
    """Write or publish carried a stale version"""
    pass


class ContentDecodeError(StoreError):
    """Entry exists but its content field could not be decoded"""

    def __init__(self, message: str, document=None, **kwargs):
        super().__init__(message, **kwargs)
        self.document = document


class SyncError(SyncAppError):
    """Pipeline failure attributed to one stage"""

    def __init__(self, stage: str, cause: Exception):
        super().__init__(f"{stage}: {cause}", {})
        self.stage = stage
        self.cause = cause
