"""Pydantic schemas for link graph endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from wikigraph.schemas.common import ArticleRef


class OutgoingLink(BaseModel):
    """One [[reference]] of an article and what it resolved to."""

    id: UUID = Field(description="Link UUID")
    target_title: str = Field(description="Literal reference title")
    target: ArticleRef | None = Field(
        default=None, description="Resolved article (null for a broken link)"
    )
    is_orphan: bool = Field(description="True when no article matches yet")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Backlink(BaseModel):
    """An incoming link: which article references this one."""

    id: UUID = Field(description="Link UUID")
    source: ArticleRef = Field(description="Referencing article")
    target_title: str = Field(description="Reference title as written in the source")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BrokenLink(BaseModel):
    """An orphan link together with the article that contains it."""

    id: UUID = Field(description="Link UUID")
    source: ArticleRef = Field(description="Article containing the reference")
    target_title: str = Field(description="Title no article matches")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GraphStatsResponse(BaseModel):
    """Overall link graph counters."""

    article_count: int = Field(description="Total articles")
    link_count: int = Field(description="Total links")
    resolved_link_count: int = Field(description="Links with a target article")
    orphan_link_count: int = Field(description="Links without a target article")

    model_config = ConfigDict(from_attributes=True)
