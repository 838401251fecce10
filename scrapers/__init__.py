"""
Scrapers Module
"""
from .base import BaseScraper
from .github_scraper import GitHubScraper

__all__ = [
    "BaseScraper",
    "GitHubScraper",
]
