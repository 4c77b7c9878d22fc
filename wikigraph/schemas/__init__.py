"""Pydantic schemas for API request/response models."""

from wikigraph.schemas.articles import (
    ArticleCreate,
    ArticleResponse,
    ArticleSuggestion,
    ArticleSummary,
    ArticleUpdate,
)
from wikigraph.schemas.common import (
    ArticleRef,
    ErrorResponse,
    PaginatedResponse,
)
from wikigraph.schemas.imports import MarkdownImportRequest, MarkdownImportResponse
from wikigraph.schemas.links import (
    Backlink,
    BrokenLink,
    GraphStatsResponse,
    OutgoingLink,
)
from wikigraph.schemas.versions import (
    DiffSegmentResponse,
    RevertResponse,
    VersionDiffResponse,
    VersionResponse,
    VersionSummary,
)

__all__ = [
    # Common
    "ArticleRef",
    "ErrorResponse",
    "PaginatedResponse",
    # Articles
    "ArticleCreate",
    "ArticleResponse",
    "ArticleSuggestion",
    "ArticleSummary",
    "ArticleUpdate",
    # Links
    "Backlink",
    "BrokenLink",
    "GraphStatsResponse",
    "OutgoingLink",
    # Versions
    "DiffSegmentResponse",
    "RevertResponse",
    "VersionDiffResponse",
    "VersionResponse",
    "VersionSummary",
    # Import
    "MarkdownImportRequest",
    "MarkdownImportResponse",
]
