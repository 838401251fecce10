"""
Base Scraper
Abstract base for upstream source clients
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx


class BaseScraper(ABC):
    """
    Base class for HTTP-backed source clients.

    Owns an ``httpx.AsyncClient`` unless one is injected, in which case the
    caller keeps ownership and ``close`` leaves it open.
    """

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._session = client
        self._owns_session = client is None

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name used in logs and errors"""
        pass

    @abstractmethod
    def _default_headers(self) -> Dict[str, str]:
        pass

    def is_configured(self) -> bool:
        """Whether credentials are present; sources may still work without them"""
        return True

    def _get_session(self) -> httpx.AsyncClient:
        if self._session is None:
            self._session = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers=self._default_headers(),
                follow_redirects=True,
            )
            self._owns_session = True
        return self._session

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release the HTTP client if this scraper created it"""
        if self._session is not None and self._owns_session:
            await self._session.aclose()
        self._session = None
