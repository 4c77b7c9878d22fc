"""Revision history API endpoints: listing, diff and revert."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.api.articles import build_article_response
from wikigraph.api.deps import get_article_locks, get_user_id, with_conflict_retry
from wikigraph.core.config import settings
from wikigraph.db import get_db
from wikigraph.schemas import (
    DiffSegmentResponse,
    PaginatedResponse,
    RevertResponse,
    VersionDiffResponse,
    VersionResponse,
    VersionSummary,
)
from wikigraph.services import ArticleLockRegistry, ArticleService, RevertService, RevisionLog

router = APIRouter()


@router.get(
    "/{article_id}/versions",
    response_model=PaginatedResponse[VersionSummary],
    summary="List versions",
    description="Revision history of an article, newest first.",
)
async def list_versions(
    article_id: UUID,
    page: int = Query(default=1, ge=1, description="Page number"),
    page_size: int | None = Query(default=None, ge=1, le=500, description="Items per page"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[VersionSummary]:
    """List the versions of an article."""
    await ArticleService(db).get(article_id)
    page_size = page_size or settings.versions_page_size

    revisions = RevisionLog(db)
    total = await revisions.count(article_id)
    versions = await revisions.list(article_id, offset=(page - 1) * page_size, limit=page_size)

    return PaginatedResponse.create(
        items=[VersionSummary.model_validate(v) for v in versions],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/{article_id}/versions/{version_id}",
    response_model=VersionResponse,
    summary="Get version",
    description="A full snapshot of one version.",
)
async def get_version(
    article_id: UUID,
    version_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> VersionResponse:
    """Get one version of an article."""
    version = await RevisionLog(db).get(article_id, version_id)
    return VersionResponse.model_validate(version)


@router.get(
    "/{article_id}/versions/{version_id}/diff",
    response_model=VersionDiffResponse,
    summary="Diff versions",
    description=(
        "Line diff of a version against `compare` (another version of the same "
        "article) or, by default, against its predecessor."
    ),
)
async def diff_version(
    article_id: UUID,
    version_id: UUID,
    compare: UUID | None = Query(default=None, description="Baseline version id"),
    db: AsyncSession = Depends(get_db),
) -> VersionDiffResponse:
    """Compare two versions."""
    diff = await RevisionLog(db).diff(article_id, version_id, compare_with_id=compare)

    return VersionDiffResponse(
        version=VersionSummary.model_validate(diff.version),
        compare_version=(
            VersionSummary.model_validate(diff.compare_version)
            if diff.compare_version is not None
            else None
        ),
        title_changed=diff.title_changed,
        old_title=diff.old_title,
        new_title=diff.new_title,
        added_lines=diff.added_lines,
        removed_lines=diff.removed_lines,
        content=[DiffSegmentResponse(**segment.to_dict()) for segment in diff.content],
    )


@router.post(
    "/{article_id}/versions/{version_id}/revert",
    response_model=RevertResponse,
    summary="Revert to version",
    description=(
        "Restore the article to a version. History is kept: a new REVERT "
        "version copying the target is appended."
    ),
)
async def revert_to_version(
    article_id: UUID,
    version_id: UUID,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    locks: ArticleLockRegistry = Depends(get_article_locks),
) -> RevertResponse:
    """Revert an article."""
    result = await with_conflict_retry(
        lambda: RevertService(db, locks).revert(article_id, version_id, user_id)
    )
    return RevertResponse(
        article=await build_article_response(ArticleService(db), result.article),
        version=VersionSummary.model_validate(result.version),
    )
