"""
Data Models / Schemas
Shapes flowing through the sync pipeline
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SourceRepo(BaseModel):
    """Repository as returned by the GitHub listing endpoint"""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="GitHub repository ID")
    name: str = Field(..., description="Repository name")
    full_name: str = Field(default="", description="owner/repo")
    html_url: str = Field(default="", description="Repository page")
    homepage: Optional[str] = Field(None, description="External homepage")
    description: Optional[str] = Field(None, description="Repository description")
    size: int = Field(default=0, description="Size in KB")
    pushed_at: Optional[datetime] = Field(None, description="Last push time")
    fork: bool = Field(default=False, description="Is a fork")
    archived: bool = Field(default=False, description="Is archived")
    owner: str = Field(default="", description="Owner login")

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "SourceRepo":
        owner = payload.get("owner") or {}
        return cls(
            id=payload["id"],
            name=payload["name"],
            full_name=payload.get("full_name") or "",
            html_url=payload.get("html_url") or "",
            homepage=payload.get("homepage") or None,
            description=payload.get("description"),
            size=payload.get("size") or 0,
            pushed_at=payload.get("pushed_at"),
            fork=bool(payload.get("fork")),
            archived=bool(payload.get("archived")),
            owner=owner.get("login", "") if isinstance(owner, dict) else str(owner),
        )


class RawProject(BaseModel):
    """Filtered repository with its details, before enrichment"""

    index: int = Field(..., description="Position in the filtered list, stable across stages")
    name: str = Field(..., description="Repository name")
    slug: str = Field(..., description="URL slug")
    github_url: str = Field(default="", description="Repository page")
    live_url: str = Field(default="", description="Deployed site, empty when unknown")
    languages: List[str] = Field(default_factory=list, description="Languages by byte weight, descending")
    readme: str = Field(default="", description="Raw README text")
    size: int = Field(default=0, description="Size in KB")
    pushed_at: Optional[datetime] = Field(None, description="Last push time")


class Project(BaseModel):
    """Enriched project as stored in the CMS"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    slug: str = ""
    short_description: str = ""
    description: str = ""
    long_description: str = ""
    github_url: str = ""
    live_url: str = ""
    technologies: List[str] = Field(default_factory=list)
    highlights: List[str] = Field(default_factory=list)
    featured: bool = False
    gradient: str = ""
    category: str = ""
    # ranking only, never written to the CMS
    pushed_at: Optional[datetime] = Field(default=None, exclude=True)

    @field_validator("technologies", "highlights", mode="before")
    @classmethod
    def _null_list(cls, value):
        return [] if value is None else value

    @field_validator(
        "name", "slug", "short_description", "description", "long_description",
        "github_url", "live_url", "gradient", "category",
        mode="before",
    )
    @classmethod
    def _null_str(cls, value):
        return "" if value is None else value

    @field_validator("featured", mode="before")
    @classmethod
    def _null_bool(cls, value):
        return False if value is None else value

    def to_cms(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ProjectsDocument(BaseModel):
    """Snapshot of the projects entry plus the version it was read at"""

    entry_id: str
    version: int
    projects: List[Project] = Field(default_factory=list)
    raw_fields: Dict[str, Any] = Field(default_factory=dict, description="Every entry field, untouched")


class BuildLogEntry(BaseModel):
    """One run record in the shared build log"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    service: str = ""
    timestamp: str = ""
    triggered_by: str = ""
    force_update: bool = False
    translation_used: bool = False
    new_added: int = 0
    total_after_sync: int = 0
    status: str = ""

    def to_cms(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class BuildLogDocument(BaseModel):
    """Build log entry snapshot; entry_id is None until the log is created"""

    entry_id: Optional[str] = None
    version: int = 0
    entries: List[Any] = Field(default_factory=list, description="Raw entries of every service, verbatim")
    raw_fields: Dict[str, Any] = Field(default_factory=dict)


class SyncStats(BaseModel):
    """Summary of one sync run"""

    new_added: int = 0
    total: int = 0
    featured: int = 0
    status: str = "success"
