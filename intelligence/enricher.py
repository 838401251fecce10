"""
Batch Enricher
Generates portfolio copy for every project in a single LLM request
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from intelligence.llm.base import BaseLLM, Message
from models import Project, RawProject
from utils.exceptions import EnrichmentError, LLMError


logger = logging.getLogger(__name__)

MAX_README_BYTES = 1500
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 20.0

CATEGORIES = ["Web", "Backend", "Full-Stack", "Libraries", "DevOps", "Game Dev", "Mobile"]

SYSTEM_PROMPT = f"""You are a technical content writer for a software engineer's portfolio website.
You will receive a JSON array of GitHub repositories with their metadata.
For EACH repository, in the same order, generate a JSON object with:

1. "name": a human-readable project name derived from the repo name (e.g. "financial-dashboard" -> "Financial Dashboard", "go-service-kit" -> "Go Service Kit"). Keep domain-style names such as "example.com" unchanged.
2. "shortDescription": 1 brief phrase, max 200 chars. A concise summary of what the project is.
3. "description": 1 sentence, max 120 chars. What the project does.
4. "longDescription": 2-3 sentences. What it does, key technical decisions, and impact.
5. "technologies": array of specific technologies (frameworks, libraries, databases).
   Use the languages list AND the README to identify: React, FastAPI, PostgreSQL, Docker, etc.
   Do NOT list generic terms like "JavaScript" if a framework like "React" is more specific.
6. "highlights": array of 3-5 bullet points. Focus on technical achievements, not features.
   Each highlight should be concise (under 60 chars).
7. "category": one of {json.dumps(CATEGORIES)}
8. "gradient": a Tailwind CSS gradient string (from-{{color}}-500 to-{{color}}-600).
   Choose colors that match the project's domain:
   - Finance/money -> emerald/teal
   - Infrastructure/DevOps -> cyan/blue
   - Frontend/UI -> purple/indigo
   - Data/Analytics -> amber/orange
   - Games -> red/rose
   - Libraries/Tools -> slate/gray

Return ONLY a valid JSON array with one object per repository. No markdown, no explanation."""


class _GeneratedFields(BaseModel):
    """Fields the model is asked to produce for one repository"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    short_description: str = ""
    description: str = ""
    long_description: str = ""
    technologies: List[str] = Field(default_factory=list)
    highlights: List[str] = Field(default_factory=list)
    category: str = ""
    gradient: str = ""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # null fields fall back to their defaults
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


def truncate_readme(readme: str, limit: int = MAX_README_BYTES) -> str:
    """Cut to ``limit`` UTF-8 bytes; a character split by the cut is dropped."""
    encoded = (readme or "").encode("utf-8")
    if len(encoded) <= limit:
        return readme or ""
    return encoded[:limit].decode("utf-8", errors="ignore")


def build_batch_prompt(projects: List[RawProject]) -> str:
    entries = [
        {
            "name": project.name,
            "languages": ", ".join(project.languages),
            "readme": truncate_readme(project.readme),
        }
        for project in projects
    ]
    return json.dumps(entries, ensure_ascii=False)


def strip_markdown_fences(text: str) -> str:
    text = (text or "").strip()
    if text.startswith("```json"):
        text = text[len("```json"):]
    elif text.startswith("```"):
        text = text[len("```"):]
    if text.endswith("```"):
        text = text[: -len("```")]
    return text.strip()


def parse_batch_response(text: str) -> List[Dict[str, Any]]:
    cleaned = strip_markdown_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise EnrichmentError(f"parse llm response: {exc}", {"response": cleaned[:200]}) from exc
    if not isinstance(data, list):
        raise EnrichmentError(
            f"parse llm response: expected a JSON array, got {type(data).__name__}",
            {"response": cleaned[:200]},
        )
    return data


def _is_rate_limited(exc: BaseException) -> bool:
    return isinstance(exc, LLMError) and exc.is_rate_limited


class BatchEnricher:
    """
    Sends every project to the LLM in one request.

    Rate-limited calls are retried up to ``max_retries`` times, waiting
    ``retry_delay * attempt`` seconds between attempts. Any other LLM error
    is fatal. Results are matched to inputs strictly by array position.
    """

    def __init__(
        self,
        llm: BaseLLM,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._llm = llm
        self.max_retries = max(0, int(max_retries))
        self.retry_delay = float(retry_delay)
        self._sleep = sleep

    def _log_retry(self, retry_state: RetryCallState) -> None:
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"Rate limited, retry {retry_state.attempt_number}/{self.max_retries} (waiting {wait:.0f}s)..."
        )

    async def _generate(self, user_prompt: str) -> str:
        messages = [Message.system(SYSTEM_PROMPT), Message.user(user_prompt)]
        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_rate_limited),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_incrementing(start=self.retry_delay, increment=self.retry_delay),
            before_sleep=self._log_retry,
            sleep=self._sleep,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._llm.acomplete(messages, response_mime_type="application/json")
        except RetryError as exc:
            last = exc.last_attempt.exception()
            raise EnrichmentError(f"llm after {self.max_retries} retries: {last}") from last
        except LLMError as exc:
            raise EnrichmentError(f"llm: {exc}") from exc
        return response.content

    async def enrich(self, projects: List[RawProject]) -> List[Project]:
        if not projects:
            return []

        logger.info(f"Sending {len(projects)} projects to {self._llm.provider} in a single batch...")
        content = await self._generate(build_batch_prompt(projects))
        data_list = parse_batch_response(content)

        result: List[Project] = []
        for idx, raw in enumerate(projects):
            if idx >= len(data_list):
                logger.warning(f"LLM did not return data for {raw.name}, skipping")
                continue
            item = data_list[idx]
            if not isinstance(item, dict):
                raise EnrichmentError(f"parse llm response: item {idx} is not an object")
            try:
                generated = _GeneratedFields.model_validate(item)
            except ValidationError as exc:
                raise EnrichmentError(f"parse llm response: item {idx}: {exc}") from exc

            result.append(
                Project(
                    name=generated.name or raw.name,
                    slug=raw.slug,
                    short_description=generated.short_description,
                    description=generated.description,
                    long_description=generated.long_description,
                    github_url=raw.github_url,
                    live_url=raw.live_url,
                    technologies=generated.technologies,
                    highlights=generated.highlights,
                    featured=False,
                    gradient=generated.gradient,
                    category=generated.category,
                    pushed_at=raw.pushed_at,
                )
            )

        logger.info(f"LLM returned data for {len(result)}/{len(projects)} projects")
        return result
