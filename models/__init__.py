"""
Data Models
"""
from .schemas import (
    SourceRepo,
    RawProject,
    Project,
    ProjectsDocument,
    BuildLogEntry,
    BuildLogDocument,
    SyncStats,
)

__all__ = [
    "SourceRepo",
    "RawProject",
    "Project",
    "ProjectsDocument",
    "BuildLogEntry",
    "BuildLogDocument",
    "SyncStats",
]
