"""
Storage Module
Contentful-backed project document and build log
"""
from .contentful_client import ContentfulClient, unwrap_locale
from .build_log import BuildLogRecorder, merge_entries

__all__ = [
    "ContentfulClient",
    "unwrap_locale",
    "BuildLogRecorder",
    "merge_entries",
]
