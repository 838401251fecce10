"""
Tests for the Contentful client against an in-memory CMA.
"""

from __future__ import annotations

import pytest

from fakes import FakeContentful
from models import Project
from storage.contentful_client import unwrap_locale
from utils.exceptions import (
    ContentDecodeError,
    EntryNotFoundError,
    StoreError,
    VersionConflictError,
)


def _stored(slug: str, featured: bool = False) -> dict:
    return Project(name=slug.title(), slug=slug, featured=featured).to_cms()


@pytest.fixture
def cma() -> FakeContentful:
    fake = FakeContentful()
    fake.add_entry(
        "entry-1",
        "siteSection",
        {
            "sectionId": {"en-US": "projects"},
            "title": {"en-US": "Projects", "es": "Proyectos"},
            "content": {"en-US": [_stored("alpha", True), _stored("beta")]},
        },
        version=7,
    )
    return fake


def test_unwrap_locale_prefers_default_then_first_key():
    assert unwrap_locale({"es": 1, "en-US": 2}, "en-US") == 2
    assert unwrap_locale({"es": 1, "de": 3}, "en-US") == 1
    assert unwrap_locale({}, "en-US") is None
    with pytest.raises(ValueError):
        unwrap_locale([1, 2], "en-US")


@pytest.mark.asyncio
async def test_get_projects_by_entry_id(cma):
    doc = await cma.client().get_projects("entry-1")

    assert doc.entry_id == "entry-1"
    assert doc.version == 7
    assert [p.slug for p in doc.projects] == ["alpha", "beta"]
    assert doc.projects[0].featured is True
    assert doc.raw_fields["title"] == {"en-US": "Projects", "es": "Proyectos"}


@pytest.mark.asyncio
async def test_get_projects_falls_back_to_section_id(cma):
    doc = await cma.client().get_projects("projects")

    assert doc.entry_id == "entry-1"
    query = cma.requests[-1]
    assert query.url.params["content_type"] == "siteSection"
    assert query.url.params["fields.sectionId"] == "projects"
    assert query.url.params["limit"] == "1"


@pytest.mark.asyncio
async def test_get_projects_not_found_anywhere(cma):
    with pytest.raises(EntryNotFoundError, match="sectionId='missing'"):
        await cma.client().get_projects("missing")


@pytest.mark.asyncio
async def test_get_projects_uses_first_locale_when_default_missing():
    fake = FakeContentful()
    fake.add_entry("e", "siteSection", {"content": {"es": [_stored("uno")]}})

    doc = await fake.client().get_projects("e")

    assert [p.slug for p in doc.projects] == ["uno"]


@pytest.mark.asyncio
async def test_get_projects_without_content_field_bootstraps_empty():
    fake = FakeContentful()
    fake.add_entry("e", "siteSection", {"sectionId": {"en-US": "projects"}}, version=2)

    doc = await fake.client().get_projects("e")

    assert doc.projects == []
    assert doc.entry_id == "e"
    assert doc.version == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [["not", "wrapped"], {"en-US": "text"}, {"en-US": [{"technologies": "x"}]}])
async def test_get_projects_undecodable_content_keeps_identity(content):
    fake = FakeContentful()
    fake.add_entry("e", "siteSection", {"content": content}, version=4)

    with pytest.raises(ContentDecodeError) as info:
        await fake.client().get_projects("e")

    assert info.value.document.entry_id == "e"
    assert info.value.document.version == 4
    assert info.value.document.projects == []


@pytest.mark.asyncio
async def test_get_entry_other_errors_are_not_treated_as_missing(cma):
    cma.failures["get"] = 500

    with pytest.raises(StoreError) as info:
        await cma.client().get_projects("entry-1")

    assert not isinstance(info.value, EntryNotFoundError)
    assert info.value.status_code == 500


@pytest.mark.asyncio
async def test_update_projects_round_trips_other_fields_and_returns_new_version(cma):
    client = cma.client()
    doc = await client.get_projects("entry-1")

    new_version = await client.update_projects(doc, [Project(name="Gamma", slug="gamma", featured=True)])

    assert new_version == 8
    put = cma.requests[-1]
    assert put.headers["X-Contentful-Version"] == "7"
    assert put.headers["Content-Type"] == "application/vnd.contentful.management.v1+json"
    fields = cma.entries["entry-1"]["fields"]
    assert fields["title"] == {"en-US": "Projects", "es": "Proyectos"}
    assert fields["sectionId"] == {"en-US": "projects"}
    assert cma.content_of("entry-1") == [_stored("gamma", True)]
    assert "pushedAt" not in cma.content_of("entry-1")[0]


@pytest.mark.asyncio
async def test_stale_version_is_rejected_and_last_writer_wins(cma):
    client = cma.client()
    first = await client.get_projects("entry-1")
    second = await client.get_projects("entry-1")

    await client.update_projects(first, [Project(slug="from-first")])
    with pytest.raises(VersionConflictError):
        await client.update_projects(second, [Project(slug="from-second")])

    assert [item["slug"] for item in cma.content_of("entry-1")] == ["from-first"]


@pytest.mark.asyncio
async def test_update_failure_reports_status_and_body(cma):
    client = cma.client()
    doc = await client.get_projects("entry-1")
    cma.failures["update"] = 422

    with pytest.raises(StoreError) as info:
        await client.update_projects(doc, [])

    assert info.value.status_code == 422
    assert "update failed on purpose" in str(info.value)


@pytest.mark.asyncio
async def test_publish_requires_current_version(cma):
    client = cma.client()
    doc = await client.get_projects("entry-1")
    new_version = await client.update_projects(doc, [Project(slug="x")])

    with pytest.raises(VersionConflictError):
        await client.publish_entry("entry-1", doc.version)
    await client.publish_entry("entry-1", new_version)

    assert cma.published["entry-1"] == new_version


@pytest.mark.asyncio
async def test_publish_unknown_entry_fails_loudly(cma):
    with pytest.raises(StoreError) as info:
        await cma.client().publish_entry("nope", 1)

    assert info.value.status_code == 404


@pytest.mark.asyncio
async def test_build_log_create_then_update(cma):
    client = cma.client()

    empty = await client.get_build_log()
    assert empty.entry_id is None and empty.entries == []

    entry_id, version = await client.create_build_log([{"service": "a"}])
    assert cma.requests[-1].headers["X-Contentful-Content-Type"] == "buildLog"

    log = await client.get_build_log()
    assert log.entry_id == entry_id
    assert log.version == version
    assert log.entries == [{"service": "a"}]

    new_version = await client.update_build_log(log, [{"service": "a"}, {"service": "b"}])
    assert new_version == version + 1
    assert cma.entries[entry_id]["fields"]["entries"]["en-US"] == [{"service": "a"}, {"service": "b"}]


@pytest.mark.asyncio
async def test_get_projects_accepts_null_fields():
    fake = FakeContentful()
    stored = {
        "name": "Alpha",
        "slug": "alpha",
        "shortDescription": None,
        "liveUrl": None,
        "technologies": None,
        "highlights": None,
        "featured": None,
    }
    fake.add_entry("e", "siteSection", {"content": {"en-US": [stored]}}, version=2)

    doc = await fake.client().get_projects("e")

    project = doc.projects[0]
    assert project.slug == "alpha"
    assert project.technologies == [] and project.highlights == []
    assert project.short_description == "" and project.live_url == ""
    assert project.featured is False


@pytest.mark.asyncio
async def test_get_build_log_keeps_non_object_items():
    fake = FakeContentful()
    fake.add_entry("log", "buildLog", {"entries": {"en-US": [{"service": "a"}, "legacy line", None]}})

    log = await fake.client().get_build_log()

    assert log.entries == [{"service": "a"}, "legacy line", None]
