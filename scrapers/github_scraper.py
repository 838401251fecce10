"""
GitHub Scraper
Lists an owner's repositories and fetches per-repository details
"""
from typing import Dict, List, Optional
import logging

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from scrapers.base import BaseScraper
from models import SourceRepo
from utils.exceptions import ScraperError


logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class GitHubScraper(BaseScraper):
    """
    GitHub REST client.

    A token is optional: unauthenticated calls work but hit a much lower
    rate limit.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        self.token = token
        self.api_url = api_url.rstrip("/")

    @property
    def name(self) -> str:
        return "GitHub"

    def is_configured(self) -> bool:
        return bool(self.token)

    def _default_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "github-cms-sync",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _headers(self, accept: Optional[str] = None) -> Dict[str, str]:
        headers = self._default_headers()
        if accept:
            headers["Accept"] = accept
        return headers

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _get_page(self, owner: str, page: int) -> list:
        response = await self._get_session().get(
            f"{self.api_url}/users/{owner}/repos",
            params={"type": "owner", "sort": "pushed", "per_page": PAGE_SIZE, "page": page},
            headers=self._headers(),
        )
        if response.status_code != 200:
            raise ScraperError(
                f"list repos failed ({response.status_code}): {response.text}",
                source=self.name,
                owner=owner,
                page=page,
            )
        payload = response.json()
        if not isinstance(payload, list):
            raise ScraperError("list repos returned a non-list payload", source=self.name, owner=owner)
        return payload

    async def list_repos(self, owner: str) -> List[SourceRepo]:
        """
        List every public repository owned by ``owner``.

        Pages until a short page comes back. Transport errors are retried;
        any non-200 response is raised as ScraperError.
        """
        repos: List[SourceRepo] = []
        page = 1
        while True:
            payload = await self._get_page(owner, page)
            repos.extend(SourceRepo.from_api(item) for item in payload)
            if len(payload) < PAGE_SIZE:
                break
            page += 1

        logger.info(f"[GitHub] {owner} has {len(repos)} public repos")
        return repos

    async def get_languages(self, owner: str, repo: str) -> Dict[str, int]:
        """Language name -> byte count for one repository."""
        response = await self._get_session().get(
            f"{self.api_url}/repos/{owner}/{repo}/languages",
            headers=self._headers(),
        )
        if response.status_code != 200:
            raise ScraperError(
                f"languages failed ({response.status_code})",
                source=self.name,
                repo=repo,
            )
        payload = response.json()
        if not isinstance(payload, dict):
            raise ScraperError("languages returned a non-object payload", source=self.name, repo=repo)
        return {str(name): int(count) for name, count in payload.items()}

    async def get_readme(self, owner: str, repo: str) -> str:
        """Raw README text; empty when the repository has none."""
        response = await self._get_session().get(
            f"{self.api_url}/repos/{owner}/{repo}/readme",
            headers=self._headers(accept="application/vnd.github.raw"),
        )
        if response.status_code == 404:
            return ""
        if response.status_code != 200:
            raise ScraperError(
                f"readme failed ({response.status_code})",
                source=self.name,
                repo=repo,
            )
        return response.text or ""
