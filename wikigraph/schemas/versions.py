"""Pydantic schemas for the revision history endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from wikigraph.db.enums import ArticleStatus, ChangeType
from wikigraph.schemas.articles import ArticleResponse


class VersionSummary(BaseModel):
    """A version without its content, for history listings."""

    id: UUID = Field(description="Version UUID")
    version: int = Field(description="Per-article version number (1-based)")
    title: str = Field(description="Title at this version")
    status: ArticleStatus = Field(description="Status at this version")
    change_type: ChangeType = Field(description="CREATE, UPDATE or REVERT")
    change_summary: str | None = Field(default=None, description="Change summary")
    author_id: UUID = Field(description="Acting user")
    created_at: datetime = Field(description="When the version was written")

    model_config = ConfigDict(from_attributes=True)


class VersionResponse(VersionSummary):
    """A full version snapshot."""

    article_id: UUID = Field(description="Owning article")
    content: str = Field(description="Content at this version")


class DiffSegmentResponse(BaseModel):
    """A run of consecutive lines with the same diff kind."""

    text: str = Field(description="Lines, line endings included")
    kind: str = Field(description="unchanged, added or removed", examples=["added"])
    count: int = Field(description="Number of lines")

    model_config = ConfigDict(from_attributes=True)


class VersionDiffResponse(BaseModel):
    """Comparison of a version with its baseline."""

    version: VersionSummary = Field(description="Compared version")
    compare_version: VersionSummary | None = Field(
        default=None, description="Baseline version (null for the empty baseline)"
    )
    title_changed: bool
    old_title: str | None = None
    new_title: str
    added_lines: int
    removed_lines: int
    content: list[DiffSegmentResponse] = Field(description="Line diff segments")

    model_config = ConfigDict(from_attributes=True)


class RevertResponse(BaseModel):
    """Result of a revert: the restored article and the appended version."""

    article: ArticleResponse
    version: VersionSummary
