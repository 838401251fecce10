"""
Contentful Management API client
Versioned read-modify-write of the projects entry and the build log
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from models import BuildLogDocument, Project, ProjectsDocument
from utils.exceptions import (
    ContentDecodeError,
    EntryNotFoundError,
    StoreError,
    VersionConflictError,
)


logger = logging.getLogger(__name__)

CMA_BASE_URL = "https://api.contentful.com"
CMA_CONTENT_TYPE = "application/vnd.contentful.management.v1+json"

CONTENT_FIELD = "content"
SECTION_ID_FIELD = "sectionId"
BUILD_LOG_FIELD = "entries"


def unwrap_locale(field_value: Any, locale: str) -> Any:
    """
    Return the value stored under ``locale``, or under the first locale
    present when ``locale`` is missing.
    """
    if not isinstance(field_value, dict):
        raise ValueError("field is not locale-wrapped")
    if locale in field_value:
        return field_value[locale]
    for value in field_value.values():
        return value
    return None


class ContentfulClient:
    """
    Thin async client over the Contentful Management API.

    Writes always carry the version read beforehand; Contentful answers a
    stale version with 409, raised here as VersionConflictError.
    """

    def __init__(
        self,
        space_id: str,
        token: str,
        environment: str = "master",
        base_url: str = CMA_BASE_URL,
        locale: str = "en-US",
        section_content_type: str = "siteSection",
        build_log_content_type: str = "buildLog",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.space_id = space_id
        self.token = token
        self.environment = environment
        self.base_url = base_url.rstrip("/")
        self.locale = locale
        self.section_content_type = section_content_type
        self.build_log_content_type = build_log_content_type
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._owns_client = client is None

    async def __aenter__(self) -> "ContentfulClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def entries_url(self) -> str:
        return f"{self.base_url}/spaces/{self.space_id}/environments/{self.environment}/entries"

    def _headers(self, version: Optional[int] = None, content_type_id: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": CMA_CONTENT_TYPE,
        }
        if version is not None:
            headers["X-Contentful-Version"] = str(version)
        if content_type_id:
            headers["X-Contentful-Content-Type"] = content_type_id
        return headers

    @staticmethod
    def _check(response: httpx.Response, action: str) -> Dict[str, Any]:
        if response.status_code == 409:
            raise VersionConflictError(
                f"CMA {action} rejected: version conflict",
                status_code=response.status_code,
                body=response.text,
            )
        if not 200 <= response.status_code < 300:
            raise StoreError(f"CMA {action} failed", status_code=response.status_code, body=response.text)
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError(f"decode {action} response: {exc}", status_code=response.status_code, body=response.text) from exc

    @staticmethod
    def _sys(entry: Dict[str, Any]) -> Tuple[str, int]:
        sys = entry.get("sys") or {}
        return str(sys.get("id") or ""), int(sys.get("version") or 0)

    # ------------------------------------------------------------------
    # Generic entry access
    # ------------------------------------------------------------------

    async def get_entry(self, entry_id: str) -> Dict[str, Any]:
        response = await self._client.get(f"{self.entries_url}/{entry_id}", headers=self._headers())
        if response.status_code == 404:
            raise EntryNotFoundError(f"entry {entry_id!r} not found", status_code=404, body=response.text)
        return self._check(response, "get entry")

    async def find_entry(
        self,
        content_type: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """First entry of ``content_type`` (optionally with ``fields.<field> == value``), or None."""
        params = {"content_type": content_type, "limit": "1"}
        if field:
            params[f"fields.{field}"] = value or ""
        response = await self._client.get(self.entries_url, params=params, headers=self._headers())
        payload = self._check(response, "query")
        items = payload.get("items") or []
        return items[0] if items else None

    async def publish_entry(self, entry_id: str, version: int) -> int:
        """Publish ``version`` of the entry; returns the published version."""
        response = await self._client.put(
            f"{self.entries_url}/{entry_id}/published",
            headers=self._headers(version=version),
        )
        payload = self._check(response, "publish")
        return self._sys(payload)[1]

    async def _put_fields(self, entry_id: str, version: int, fields: Dict[str, Any], action: str) -> int:
        response = await self._client.put(
            f"{self.entries_url}/{entry_id}",
            json={"fields": fields},
            headers=self._headers(version=version),
        )
        payload = self._check(response, action)
        return self._sys(payload)[1]

    # ------------------------------------------------------------------
    # Projects entry
    # ------------------------------------------------------------------

    async def _resolve_projects_entry(self, entry_id: str) -> Dict[str, Any]:
        try:
            return await self.get_entry(entry_id)
        except EntryNotFoundError:
            logger.info(f"Entry {entry_id!r} not found, looking it up by {SECTION_ID_FIELD}")

        entry = await self.find_entry(self.section_content_type, SECTION_ID_FIELD, entry_id)
        if entry is None:
            raise EntryNotFoundError(
                f"no {self.section_content_type} entry found with {SECTION_ID_FIELD}={entry_id!r}"
            )
        return entry

    async def get_projects(self, entry_id: str) -> ProjectsDocument:
        """
        Read the projects entry.

        ``entry_id`` may be the real entry ID or the section's ``sectionId``.
        A missing content field yields an empty project list. Content that
        cannot be decoded raises ContentDecodeError carrying the document
        with identity and version filled in.
        """
        entry = await self._resolve_projects_entry(entry_id)
        real_id, version = self._sys(entry)
        raw_fields = dict(entry.get("fields") or {})
        document = ProjectsDocument(entry_id=real_id, version=version, raw_fields=raw_fields)

        if CONTENT_FIELD not in raw_fields:
            return document

        try:
            content = unwrap_locale(raw_fields[CONTENT_FIELD], self.locale)
            if content is None:
                return document
            if not isinstance(content, list):
                raise ValueError(f"expected a list of projects, got {type(content).__name__}")
            document.projects = [Project.model_validate(item) for item in content]
        except (ValueError, ValidationError) as exc:
            raise ContentDecodeError(f"decode projects content: {exc}", document=document) from exc

        return document

    async def update_projects(self, document: ProjectsDocument, projects: List[Project]) -> int:
        """Write ``projects`` into the content field, keeping every other field. Returns the new version."""
        fields = dict(document.raw_fields)
        fields[CONTENT_FIELD] = {self.locale: [project.to_cms() for project in projects]}
        return await self._put_fields(document.entry_id, document.version, fields, "update")

    # ------------------------------------------------------------------
    # Build log entry
    # ------------------------------------------------------------------

    async def get_build_log(self) -> BuildLogDocument:
        """Read the build log; an empty document (no entry_id) when it does not exist yet."""
        entry = await self.find_entry(self.build_log_content_type)
        if entry is None:
            return BuildLogDocument()

        entry_id, version = self._sys(entry)
        raw_fields = dict(entry.get("fields") or {})
        entries: List[Any] = []
        if BUILD_LOG_FIELD in raw_fields:
            try:
                value = unwrap_locale(raw_fields[BUILD_LOG_FIELD], self.locale)
            except ValueError as exc:
                raise StoreError(f"decode build log: {exc}") from exc
            if value is not None and not isinstance(value, list):
                raise StoreError("decode build log: entries is not a list")
            entries = list(value or [])

        return BuildLogDocument(entry_id=entry_id, version=version, entries=entries, raw_fields=raw_fields)

    async def create_build_log(self, entries: List[Any]) -> Tuple[str, int]:
        response = await self._client.post(
            self.entries_url,
            json={"fields": {BUILD_LOG_FIELD: {self.locale: entries}}},
            headers=self._headers(content_type_id=self.build_log_content_type),
        )
        payload = self._check(response, "create build log")
        return self._sys(payload)

    async def update_build_log(self, document: BuildLogDocument, entries: List[Any]) -> int:
        fields = dict(document.raw_fields)
        fields[BUILD_LOG_FIELD] = {self.locale: entries}
        return await self._put_fields(document.entry_id, document.version, fields, "update build log")
