"""Sync pipeline stages: filtering, detail collection and selection."""

from .mapper import filter_repos, sorted_languages, to_raw_project
from .collector import DetailCollector
from .heuristic import apply_featured

__all__ = [
    "filter_repos",
    "sorted_languages",
    "to_raw_project",
    "DetailCollector",
    "apply_featured",
]
