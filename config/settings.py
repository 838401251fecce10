"""
Settings Configuration
Pydantic-based configuration loading and validation
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from utils.exceptions import ConfigurationError


class GitHubSettings(BaseSettings):
    """GitHub API settings"""
    username: str = Field(default="alberto-moreno-sa", description="Owner whose repositories are synced")
    token: Optional[str] = Field(default=None, description="GitHub token (optional, raises rate limits)")
    api_url: str = Field(default="https://api.github.com", description="GitHub REST base URL")

    class Config:
        env_prefix = "GITHUB_"


class ContentfulSettings(BaseSettings):
    """Contentful Management API settings"""
    space_id: Optional[str] = Field(default=None, description="Space ID")
    cma_token: Optional[str] = Field(default=None, description="Management API token")
    entry_id: Optional[str] = Field(default=None, description="Projects entry ID or its sectionId")
    environment: str = Field(default="master", description="Environment ID")
    locale: str = Field(default="en-US", description="Locale the content field is written under")
    base_url: str = Field(default="https://api.contentful.com", description="CMA base URL")
    section_content_type: str = Field(default="siteSection", description="Content type of the projects entry")
    build_log_content_type: str = Field(default="buildLog", description="Content type of the build log entry")

    class Config:
        env_prefix = "CONTENTFUL_"


class LLMSettings(BaseSettings):
    """LLM settings"""
    provider: str = Field(default="gemini", description="LLM provider: gemini, openai")
    model_name: Optional[str] = Field(default=None, description="Model name (provider default when empty)")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    max_tokens: int = Field(default=8192, description="Max output tokens")

    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("LLM_GEMINI_API_KEY", "GEMINI_API_KEY"),
        description="Google Gemini API key",
    )
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("LLM_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="OpenAI API key",
    )

    class Config:
        env_prefix = "LLM_"
        populate_by_name = True

    def api_key_for(self, provider: Optional[str] = None) -> Optional[str]:
        keys = {
            "gemini": self.gemini_api_key,
            "openai": self.openai_api_key,
        }
        return keys.get(provider or self.provider)


class SyncSettings(BaseSettings):
    """Pipeline tuning"""
    max_featured: int = Field(
        default=5,
        validation_alias=AliasChoices("SYNC_MAX_FEATURED", "MAX_FEATURED"),
        description="Number of most recent projects flagged as featured",
    )
    max_projects: int = Field(
        default=15,
        validation_alias=AliasChoices("SYNC_MAX_PROJECTS", "MAX_PROJECTS"),
        description="Max projects written to the CMS",
    )
    force_update: bool = Field(
        default=False,
        validation_alias=AliasChoices("SYNC_FORCE_UPDATE", "FORCE_UPDATE"),
        description="Overwrite content even when the stored content cannot be decoded",
    )
    concurrency: int = Field(default=5, description="Concurrent repository detail fetches")
    max_retries: int = Field(default=3, description="LLM retries on rate limiting")
    retry_delay: float = Field(default=20.0, description="Backoff base in seconds, scaled by attempt")
    request_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    run_timeout: float = Field(default=900.0, description="Deadline for the whole run in seconds")
    service_name: str = Field(default="github-cms-sync", description="Service name used in the build log")

    class Config:
        env_prefix = "SYNC_"
        populate_by_name = True


class Settings(BaseSettings):
    """Root settings aggregating every section"""

    github: GitHubSettings = Field(default_factory=GitHubSettings)
    contentful: ContentfulSettings = Field(default_factory=ContentfulSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """Load settings, reading a .env file into the environment first."""
        if env_path is None:
            candidates = [Path.cwd() / ".env", Path(__file__).parent / ".env"]
        else:
            candidates = [env_path]

        from dotenv import load_dotenv

        for candidate in candidates:
            if candidate.exists():
                load_dotenv(candidate)

        return cls(
            github=GitHubSettings(),
            contentful=ContentfulSettings(),
            llm=LLMSettings(),
            sync=SyncSettings(),
        )

    def missing_required(self) -> List[str]:
        missing = []
        if not self.contentful.space_id:
            missing.append("CONTENTFUL_SPACE_ID")
        if not self.contentful.cma_token:
            missing.append("CONTENTFUL_CMA_TOKEN")
        if not self.contentful.entry_id:
            missing.append("CONTENTFUL_ENTRY_ID")
        if not self.llm.api_key_for():
            missing.append(f"{self.llm.provider.upper()}_API_KEY")
        return missing

    def validate_required(self) -> "Settings":
        """Raise ConfigurationError naming every missing required value."""
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(
                f"missing required configuration: {', '.join(missing)}",
                {"missing": missing},
            )
        if self.sync.max_featured < 0 or self.sync.max_projects < 0:
            raise ConfigurationError("MAX_FEATURED and MAX_PROJECTS must not be negative")
        if self.sync.concurrency < 1:
            raise ConfigurationError("SYNC_CONCURRENCY must be at least 1")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings loaded from the environment"""
    return Settings.load_from_env_file()


def get_llm_settings() -> LLMSettings:
    return get_settings().llm
