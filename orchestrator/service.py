"""Sync orchestrator: GitHub -> LLM enrichment -> Contentful."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, List, Optional, TypeVar

from config import Settings
from intelligence.enricher import BatchEnricher
from intelligence.llm import BaseLLM, get_llm
from models import Project, ProjectsDocument, SyncStats
from pipeline import DetailCollector, apply_featured, filter_repos
from scrapers import GitHubScraper
from storage import BuildLogRecorder, ContentfulClient
from utils.exceptions import ContentDecodeError, SyncError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _stage(name: str, awaitable: Awaitable[T]) -> T:
    try:
        return await awaitable
    except Exception as exc:
        raise SyncError(name, exc) from exc


class SyncService:
    """
    One sync run.

    Every dependency is injected, so tests can swap the scraper, the LLM
    and the store for fakes.
    """

    def __init__(
        self,
        settings: Settings,
        scraper: GitHubScraper,
        llm: BaseLLM,
        store: ContentfulClient,
        enricher: Optional[BatchEnricher] = None,
    ) -> None:
        self._settings = settings
        self._scraper = scraper
        self._store = store
        self._enricher = enricher or BatchEnricher(
            llm,
            max_retries=settings.sync.max_retries,
            retry_delay=settings.sync.retry_delay,
        )

    async def _load_document(self, entry_id: str) -> ProjectsDocument:
        try:
            return await self._store.get_projects(entry_id)
        except ContentDecodeError as exc:
            if not self._settings.sync.force_update or exc.document is None:
                raise SyncError("get", exc) from exc
            logger.warning(f"Overwriting undecodable content (force update): {exc}")
            return exc.document
        except Exception as exc:
            raise SyncError("get", exc) from exc

    async def run(self) -> SyncStats:
        owner = self._settings.github.username
        sync_settings = self._settings.sync

        logger.info("Fetching GitHub repositories...")
        repos = await _stage("list", self._scraper.list_repos(owner))
        logger.info(f"Found {len(repos)} public repos")

        filtered = filter_repos(repos, owner)
        logger.info(f"After filtering: {len(filtered)} repos")
        if not filtered:
            return SyncStats(status="success")

        logger.info("Fetching repo details (languages, READMEs)...")
        collector = DetailCollector(self._scraper, owner, concurrency=sync_settings.concurrency)
        raw_projects = await _stage("collect", collector.collect(filtered))

        logger.info("Enriching projects...")
        enriched = await _stage("enrich", self._enricher.enrich(raw_projects))
        logger.info(f"Enriched {len(enriched)} projects")

        projects: List[Project] = apply_featured(enriched, sync_settings.max_featured, sync_settings.max_projects)
        featured = sum(1 for project in projects if project.featured)
        logger.info(f"Final selection: {len(projects)} projects ({featured} featured)")

        logger.info("Fetching current projects from Contentful...")
        document = await self._load_document(self._settings.contentful.entry_id)

        logger.info("Updating projects in Contentful...")
        new_version = await _stage("update", self._store.update_projects(document, projects))

        # publish by the resolved entry id; the configured one may be a sectionId
        await _stage("publish", self._store.publish_entry(document.entry_id, new_version))
        logger.info("Successfully synced and published.")

        return SyncStats(
            new_added=len(projects) - len(document.projects),
            total=len(projects),
            featured=featured,
            status="success",
        )


async def run_sync(settings: Settings, triggered_by: str = "local") -> SyncStats:
    """Wire the real clients, then run one sync and record the build log under a single deadline."""
    settings.validate_required()

    scraper = GitHubScraper(
        token=settings.github.token,
        api_url=settings.github.api_url,
        timeout=settings.sync.request_timeout,
    )
    store = ContentfulClient(
        space_id=settings.contentful.space_id,
        token=settings.contentful.cma_token,
        environment=settings.contentful.environment,
        base_url=settings.contentful.base_url,
        locale=settings.contentful.locale,
        section_content_type=settings.contentful.section_content_type,
        build_log_content_type=settings.contentful.build_log_content_type,
        timeout=settings.sync.request_timeout,
    )
    llm = get_llm(settings=settings.llm)

    async def _sync_and_record() -> SyncStats:
        service = SyncService(settings, scraper, llm, store)
        stats = await service.run()
        logger.info(f"Sync complete: {stats.total} projects ({stats.new_added} new)")

        recorder = BuildLogRecorder(store, service_name=settings.sync.service_name)
        await recorder.record(stats, force_update=settings.sync.force_update, triggered_by=triggered_by)
        return stats

    try:
        async with scraper, store:
            # the build log shares the run deadline
            return await asyncio.wait_for(_sync_and_record(), timeout=settings.sync.run_timeout)
    finally:
        await llm.aclose()
