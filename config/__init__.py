"""
Configuration Management Module
"""
from .settings import (
    Settings,
    GitHubSettings,
    ContentfulSettings,
    LLMSettings,
    SyncSettings,
    get_settings,
    get_llm_settings,
)

__all__ = [
    "Settings",
    "GitHubSettings",
    "ContentfulSettings",
    "LLMSettings",
    "SyncSettings",
    "get_settings",
    "get_llm_settings",
]
