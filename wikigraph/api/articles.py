"""Article API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.api.deps import get_article_locks, get_user_id, with_conflict_retry
from wikigraph.db import get_db
from wikigraph.db.enums import ArticleStatus
from wikigraph.db.models import Article
from wikigraph.schemas import (
    ArticleCreate,
    ArticleResponse,
    ArticleSuggestion,
    ArticleSummary,
    ArticleUpdate,
    Backlink,
    OutgoingLink,
    PaginatedResponse,
)
from wikigraph.services import ArticleLockRegistry, ArticleService, LinkGraphService

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================


async def build_article_response(service: ArticleService, article: Article) -> ArticleResponse:
    """Article response with its outgoing link count."""
    response = ArticleResponse.model_validate(article)
    response.link_count = await service.link_count(article.id)
    return response


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "",
    response_model=ArticleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an article",
    description=(
        "Create an article. Version 1 is recorded, its [[wiki-links]] are "
        "resolved and existing broken links to its title are attached."
    ),
)
async def create_article(
    payload: ArticleCreate,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    locks: ArticleLockRegistry = Depends(get_article_locks),
) -> ArticleResponse:
    """Create a new article."""
    service = ArticleService(db, locks)
    article = await with_conflict_retry(
        lambda: service.create(
            title=payload.title,
            content=payload.content,
            author_id=user_id,
            status=payload.status,
            change_summary=payload.change_summary,
        )
    )
    return await build_article_response(service, article)


@router.get(
    "",
    response_model=PaginatedResponse[ArticleSummary],
    summary="List articles",
    description="List articles, most recently updated first.",
)
async def list_articles(
    page: int = Query(default=1, ge=1, description="Page number"),
    page_size: int = Query(default=20, ge=1, le=100, description="Items per page"),
    status_filter: ArticleStatus | None = Query(default=None, alias="status"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[ArticleSummary]:
    """List articles with pagination."""
    service = ArticleService(db)
    total = await service.count(status=status_filter)
    articles = await service.list(
        status=status_filter,
        offset=(page - 1) * page_size,
        limit=page_size,
    )
    return PaginatedResponse.create(
        items=[ArticleSummary.model_validate(a) for a in articles],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/suggestions",
    response_model=list[ArticleSuggestion],
    summary="Suggest article titles",
    description="Title autocomplete for the [[wiki-link]] editor.",
)
async def suggest_articles(
    q: str = Query(min_length=1, max_length=200, description="Typed text"),
    limit: int | None = Query(default=None, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
) -> list[ArticleSuggestion]:
    """Suggest articles whose title contains the query."""
    articles = await ArticleService(db).suggest(q, limit=limit)
    return [ArticleSuggestion.model_validate(a) for a in articles]


@router.get(
    "/{article_ref}",
    response_model=ArticleResponse,
    summary="Get article",
    description="Retrieve an article by UUID or slug.",
)
async def get_article(
    article_ref: str,
    db: AsyncSession = Depends(get_db),
) -> ArticleResponse:
    """Get an article by id or slug."""
    service = ArticleService(db)
    article = await service.get_by_id_or_slug(article_ref)
    return await build_article_response(service, article)


@router.patch(
    "/{article_id}",
    response_model=ArticleResponse,
    summary="Update article",
    description=(
        "Partially update an article. A new version is recorded when anything "
        "changes; links are re-synced when the content changes."
    ),
)
async def update_article(
    article_id: UUID,
    payload: ArticleUpdate,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    locks: ArticleLockRegistry = Depends(get_article_locks),
) -> ArticleResponse:
    """Update an article."""
    service = ArticleService(db, locks)
    article = await with_conflict_retry(
        lambda: service.update(
            article_id,
            user_id,
            title=payload.title,
            content=payload.content,
            status=payload.status,
            change_summary=payload.change_summary,
        )
    )
    return await build_article_response(service, article)


@router.delete(
    "/{article_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete article",
    description="Delete an article with its history. Links pointing at it become broken links.",
)
async def delete_article(
    article_id: UUID,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    locks: ArticleLockRegistry = Depends(get_article_locks),
) -> None:
    """Delete an article."""
    await with_conflict_retry(
        lambda: ArticleService(db, locks).delete(article_id, actor_id=user_id)
    )


@router.get(
    "/{article_ref}/backlinks",
    response_model=list[Backlink],
    summary="Get backlinks",
    description="Articles whose content links to this article, newest first.",
)
async def get_backlinks(
    article_ref: str,
    db: AsyncSession = Depends(get_db),
) -> list[Backlink]:
    """Get the incoming links of an article."""
    article = await ArticleService(db).get_by_id_or_slug(article_ref)
    links = await LinkGraphService(db).get_backlinks(article.id)
    return [Backlink.model_validate(link) for link in links]


@router.get(
    "/{article_id}/links",
    response_model=list[OutgoingLink],
    summary="Get outgoing links",
    description="The [[wiki-links]] of an article with their resolution state.",
)
async def get_outgoing_links(
    article_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> list[OutgoingLink]:
    """Get the outgoing links of an article."""
    await ArticleService(db).get(article_id)
    links = await LinkGraphService(db).get_outgoing(article_id)
    return [OutgoingLink.model_validate(link) for link in links]
