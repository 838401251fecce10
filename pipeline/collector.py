"""Bounded-concurrency collection of per-repository details."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Protocol

from models import RawProject, SourceRepo
from pipeline.mapper import to_raw_project

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5


class DetailSource(Protocol):
    async def get_languages(self, owner: str, repo: str) -> Dict[str, int]: ...

    async def get_readme(self, owner: str, repo: str) -> str: ...


class DetailCollector:
    """
    Fetches languages and README for every repository under a semaphore.

    Detail failures never drop a repository: the missing attribute is
    replaced by an empty value and a warning is logged. Results are keyed
    by the repository's position in the input list, so the returned order
    matches the input regardless of completion order.
    """

    def __init__(self, source: DetailSource, owner: str, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        self._source = source
        self._owner = owner
        self._concurrency = max(1, int(concurrency))

    async def _languages(self, repo: SourceRepo) -> Dict[str, int]:
        try:
            return await self._source.get_languages(self._owner, repo.name)
        except Exception as exc:
            logger.warning(f"languages failed for {repo.name}: {exc}")
            return {}

    async def _readme(self, repo: SourceRepo) -> str:
        try:
            return await self._source.get_readme(self._owner, repo.name)
        except Exception as exc:
            logger.warning(f"readme failed for {repo.name}: {exc}")
            return ""

    async def collect(self, repos: List[SourceRepo]) -> List[RawProject]:
        semaphore = asyncio.Semaphore(self._concurrency)
        lock = asyncio.Lock()
        results: Dict[int, RawProject] = {}

        async def _collect_one(index: int, repo: SourceRepo) -> None:
            async with semaphore:
                languages = await self._languages(repo)
                readme = await self._readme(repo)
            raw = to_raw_project(index, repo, languages, readme)
            async with lock:
                results[index] = raw

        logger.info(f"Fetching details for {len(repos)} repos (concurrency={self._concurrency})")
        tasks = [asyncio.ensure_future(_collect_one(idx, repo)) for idx, repo in enumerate(repos)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return [results[idx] for idx in sorted(results)]
