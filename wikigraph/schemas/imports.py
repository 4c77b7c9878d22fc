"""Pydantic schemas for the markdown import endpoint."""

from uuid import UUID

from pydantic import BaseModel, Field

from wikigraph.db.enums import ArticleStatus


class MarkdownImportRequest(BaseModel):
    """A markdown file to import as a new article."""

    filename: str = Field(min_length=1, max_length=255, examples=["Python.md"])
    content: str = Field(description="File contents, optionally with YAML front matter")
    convert_wikilinks: bool = Field(
        default=False,
        description="Rewrite [[...]] markers as plain markdown links",
    )


class MarkdownImportResponse(BaseModel):
    """The article created by an import."""

    success: bool = True
    id: UUID
    title: str
    slug: str
    status: ArticleStatus
    link_count: int = Field(description="Outgoing wiki-links created")
