"""
Unit tests for bounded-concurrency detail collection.
"""

from __future__ import annotations

import asyncio

import pytest

from fakes import FakeScraper, make_repo
from pipeline.collector import DetailCollector


class _SlowScraper(FakeScraper):
    """Later repos finish first; tracks peak concurrency."""

    def __init__(self, repos, delays):
        super().__init__(repos)
        self.delays = delays
        self.active = 0
        self.peak = 0

    async def get_languages(self, owner, repo):
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delays[repo])
        finally:
            self.active -= 1
        return {"Go": 1}


@pytest.mark.asyncio
async def test_collect_keeps_input_order_regardless_of_completion_order():
    repos = [make_repo(idx, f"repo-{idx}") for idx in range(6)]
    delays = {f"repo-{idx}": 0.01 * (6 - idx) for idx in range(6)}
    scraper = _SlowScraper(repos, delays)

    result = await DetailCollector(scraper, "octo", concurrency=3).collect(repos)

    assert [raw.name for raw in result] == [repo.name for repo in repos]
    assert [raw.index for raw in result] == list(range(6))


@pytest.mark.asyncio
async def test_collect_respects_concurrency_limit():
    repos = [make_repo(idx, f"repo-{idx}") for idx in range(12)]
    scraper = _SlowScraper(repos, {repo.name: 0.01 for repo in repos})

    await DetailCollector(scraper, "octo", concurrency=5).collect(repos)

    assert scraper.peak <= 5


@pytest.mark.asyncio
async def test_collect_substitutes_empty_values_on_detail_failures(caplog):
    repos = [make_repo(1, "ok"), make_repo(2, "no-langs"), make_repo(3, "no-readme")]
    scraper = FakeScraper(
        repos,
        languages={"ok": {"Rust": 10, "C": 20}},
        failing_languages={"no-langs"},
        failing_readmes={"no-readme"},
    )

    with caplog.at_level("WARNING"):
        result = await DetailCollector(scraper, "octo").collect(repos)

    by_name = {raw.name: raw for raw in result}
    assert len(result) == 3
    assert by_name["ok"].languages == ["C", "Rust"]
    assert by_name["no-langs"].languages == []
    assert by_name["no-langs"].readme == "# no-langs"
    assert by_name["no-readme"].readme == ""
    assert "languages failed for no-langs" in caplog.text
    assert "readme failed for no-readme" in caplog.text


@pytest.mark.asyncio
async def test_collect_empty_input():
    assert await DetailCollector(FakeScraper([]), "octo").collect([]) == []


@pytest.mark.asyncio
async def test_collect_cancellation_unblocks_promptly():
    repos = [make_repo(idx, f"repo-{idx}") for idx in range(4)]
    scraper = _SlowScraper(repos, {repo.name: 30 for repo in repos})
    collector = DetailCollector(scraper, "octo", concurrency=2)

    task = asyncio.ensure_future(collector.collect(repos))
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(task, timeout=1)
    assert scraper.active == 0


@pytest.mark.asyncio
async def test_collect_deadline_surfaces_timeout():
    repos = [make_repo(1, "slow")]
    scraper = _SlowScraper(repos, {"slow": 30})

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(DetailCollector(scraper, "octo").collect(repos), timeout=0.05)
