"""Markdown import endpoint."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.api.deps import get_article_locks, get_user_id, with_conflict_retry
from wikigraph.db import get_db
from wikigraph.schemas import MarkdownImportRequest, MarkdownImportResponse
from wikigraph.services import ArticleLockRegistry, ArticleService, MarkdownImporter

router = APIRouter()


@router.post(
    "/markdown",
    response_model=MarkdownImportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import a markdown file",
    description=(
        "Create an article from a markdown file. A YAML front matter block may "
        "set `title` and `status` (\"published\" publishes the article)."
    ),
)
async def import_markdown(
    payload: MarkdownImportRequest,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    locks: ArticleLockRegistry = Depends(get_article_locks),
) -> MarkdownImportResponse:
    """Import a markdown document as a new article."""
    importer = MarkdownImporter(db, locks)
    article = await with_conflict_retry(
        lambda: importer.import_markdown(
            payload.filename,
            payload.content,
            user_id,
            convert_wikilinks=payload.convert_wikilinks,
        )
    )
    return MarkdownImportResponse(
        id=article.id,
        title=article.title,
        slug=article.slug,
        status=article.status,
        link_count=await ArticleService(db).link_count(article.id),
    )
