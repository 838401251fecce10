"""
Unit tests for recency ranking and featured selection.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from fakes import BASE_TIME
from models import Project
from pipeline.heuristic import apply_featured


def _projects(count: int):
    return [
        Project(name=f"P{idx}", slug=f"p{idx:02d}", pushed_at=BASE_TIME - timedelta(days=(idx * 7) % count))
        for idx in range(count)
    ]


@pytest.mark.parametrize(
    "count,featured,total",
    [(0, 5, 15), (3, 5, 15), (16, 5, 15), (15, 0, 15), (20, 15, 15), (8, 3, 4), (10, 0, 0)],
)
def test_apply_featured_length_flags_and_order(count, featured, total):
    result = apply_featured(_projects(count), featured, total)

    assert len(result) == min(count, total)
    assert sum(1 for p in result if p.featured) == min(featured, len(result))
    assert all(p.featured for p in result[: min(featured, len(result))])
    stamps = [p.pushed_at for p in result]
    assert stamps == sorted(stamps, reverse=True)


def test_apply_featured_breaks_ties_by_slug():
    projects = [
        Project(slug="zeta", pushed_at=BASE_TIME),
        Project(slug="alpha", pushed_at=BASE_TIME),
        Project(slug="mid", pushed_at=BASE_TIME - timedelta(days=1)),
    ]

    result = apply_featured(projects, 1, 3)

    assert [p.slug for p in result] == ["alpha", "zeta", "mid"]
    assert [p.featured for p in result] == [True, False, False]


def test_apply_featured_missing_timestamp_sorts_last():
    projects = [Project(slug="undated"), Project(slug="dated", pushed_at=BASE_TIME)]

    result = apply_featured(projects, 1, 2)

    assert [p.slug for p in result] == ["dated", "undated"]


def test_apply_featured_resets_previous_flags():
    projects = [
        Project(slug="old", featured=True, pushed_at=BASE_TIME - timedelta(days=30)),
        Project(slug="new", featured=False, pushed_at=BASE_TIME),
    ]

    result = apply_featured(projects, 1, 2)

    assert [(p.slug, p.featured) for p in result] == [("new", True), ("old", False)]
