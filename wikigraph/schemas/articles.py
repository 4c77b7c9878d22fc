"""Pydantic schemas for Article API endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wikigraph.db.enums import ArticleStatus

# =============================================================================
# Request Schemas
# =============================================================================


class ArticleCreate(BaseModel):
    """Schema for creating a new article."""

    title: str = Field(min_length=1, max_length=500, description="Article title")
    content: str = Field(default="", description="Markdown body with [[wiki-links]]")
    status: ArticleStatus = Field(default=ArticleStatus.DRAFT, description="Publication state")
    change_summary: str | None = Field(
        default=None, max_length=500, description="Summary recorded on version 1"
    )

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class ArticleUpdate(BaseModel):
    """Schema for a partial article update. Omitted fields are unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    content: str | None = Field(default=None)
    status: ArticleStatus | None = Field(default=None)
    change_summary: str | None = Field(default=None, max_length=500)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


# =============================================================================
# Response Schemas
# =============================================================================


class ArticleSummary(BaseModel):
    """Summarized article for list views."""

    id: UUID = Field(description="Article UUID")
    title: str = Field(description="Article title")
    slug: str = Field(description="URL-safe identifier")
    status: ArticleStatus = Field(description="Publication state")
    updated_at: datetime = Field(description="Last modification")

    model_config = ConfigDict(from_attributes=True)


class ArticleResponse(BaseModel):
    """Schema for article response."""

    id: UUID = Field(description="Article UUID")
    title: str = Field(description="Article title")
    slug: str = Field(description="URL-safe identifier")
    content: str = Field(description="Markdown body")
    status: ArticleStatus = Field(description="Publication state")
    author_id: UUID = Field(description="Creating user")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last modification")

    # Computed fields
    link_count: int | None = Field(default=None, description="Number of outgoing links")

    model_config = ConfigDict(from_attributes=True)


class ArticleSuggestion(BaseModel):
    """Autocomplete entry for the wiki-link editor."""

    id: UUID
    title: str
    slug: str

    model_config = ConfigDict(from_attributes=True)
