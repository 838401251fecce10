"""Repository filtering and conversion into pre-enrichment projects."""

from __future__ import annotations

from typing import Dict, Iterable, List

from models import RawProject, SourceRepo


def filter_repos(repos: Iterable[SourceRepo], owner: str) -> List[SourceRepo]:
    """Drop forks, archived repos and the owner's profile README repo, keeping input order."""
    profile_repo = str(owner or "").lower()
    filtered: List[SourceRepo] = []
    for repo in repos:
        if repo.fork or repo.archived:
            continue
        if repo.name.lower() == profile_repo:
            continue
        filtered.append(repo)
    return filtered


def sorted_languages(languages: Dict[str, int]) -> List[str]:
    """Language names by byte count descending; equal counts fall back to name order."""
    ranked = sorted(languages.items(), key=lambda item: (-int(item[1]), item[0]))
    return [name for name, _ in ranked]


def to_raw_project(index: int, repo: SourceRepo, languages: Dict[str, int], readme: str) -> RawProject:
    return RawProject(
        index=index,
        name=repo.name,
        slug=repo.name,
        github_url=repo.html_url,
        live_url=repo.homepage or "",
        languages=sorted_languages(languages),
        readme=readme or "",
        size=repo.size,
        pushed_at=repo.pushed_at,
    )
