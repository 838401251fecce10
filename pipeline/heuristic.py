"""Recency ranking and featured selection."""

from __future__ import annotations

from datetime import timezone
from typing import List

from models import Project


def _recency(project: Project) -> float:
    pushed_at = project.pushed_at
    if pushed_at is None:
        return float("-inf")
    if pushed_at.tzinfo is None:
        pushed_at = pushed_at.replace(tzinfo=timezone.utc)
    return pushed_at.timestamp()


def apply_featured(projects: List[Project], max_featured: int, max_total: int) -> List[Project]:
    """
    Rank projects by last push, newest first, keep at most ``max_total``
    and flag the first ``max_featured`` as featured.

    Equal timestamps are ordered by slug so the output is deterministic.
    Projects without a timestamp sort last. Returns new Project copies.
    """
    max_featured = max(0, int(max_featured))
    max_total = max(0, int(max_total))

    ranked = sorted(projects, key=lambda p: p.slug)
    ranked = sorted(ranked, key=_recency, reverse=True)
    ranked = ranked[:max_total]

    return [project.model_copy(update={"featured": idx < max_featured}) for idx, project in enumerate(ranked)]
