"""Best-effort run records in the shared Contentful build log."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from models import BuildLogEntry, SyncStats
from storage.contentful_client import ContentfulClient

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_NAME = "github-cms-sync"
KEEP_OWN_ENTRIES = 2


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _is_own(entry: Any, service_name: str) -> bool:
    return isinstance(entry, dict) and entry.get("service") == service_name


def merge_entries(
    existing: List[Any],
    new_entry: Dict[str, Any],
    service_name: str,
    keep_own: int = KEEP_OWN_ENTRIES,
) -> List[Any]:
    """
    Other services' entries first, untouched and in order, then this
    service's last ``keep_own`` entries, then ``new_entry``.
    """
    own = [entry for entry in existing if _is_own(entry, service_name)]
    others = [entry for entry in existing if not _is_own(entry, service_name)]
    kept = own[-keep_own:] if keep_own > 0 else []
    return others + kept + [new_entry]


class BuildLogRecorder:
    """Appends one entry per run; never raises."""

    def __init__(
        self,
        client: ContentfulClient,
        service_name: str = DEFAULT_SERVICE_NAME,
        keep_own: int = KEEP_OWN_ENTRIES,
    ) -> None:
        self._client = client
        self.service_name = service_name
        self.keep_own = keep_own

    def build_entry(self, stats: SyncStats, force_update: bool, triggered_by: str) -> BuildLogEntry:
        return BuildLogEntry(
            service=self.service_name,
            timestamp=_utc_timestamp(),
            triggered_by=triggered_by,
            force_update=force_update,
            translation_used=False,
            new_added=stats.new_added,
            total_after_sync=stats.total,
            status=stats.status,
        )

    async def record(self, stats: SyncStats, force_update: bool = False, triggered_by: str = "local") -> bool:
        logger.info("Recording build log...")
        entry = self.build_entry(stats, force_update, triggered_by)

        try:
            document = await self._client.get_build_log()
        except Exception as exc:
            logger.warning(f"failed to fetch build log: {exc}")
            return False

        entries = merge_entries(document.entries, entry.to_cms(), self.service_name, self.keep_own)

        try:
            if document.entry_id is None:
                entry_id, version = await self._client.create_build_log(entries)
            else:
                entry_id = document.entry_id
                version = await self._client.update_build_log(document, entries)
        except Exception as exc:
            logger.warning(f"failed to write build log: {exc}")
            return False

        try:
            await self._client.publish_entry(entry_id, version)
        except Exception as exc:
            logger.warning(f"failed to publish build log: {exc}")
            return False

        logger.info(f"Build log updated ({len(entries)} total entries)")
        return True
