"""Link graph reports: broken links, unlinked articles and counters."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.db import get_db
from wikigraph.schemas import ArticleSummary, BrokenLink, GraphStatsResponse
from wikigraph.services import LinkGraphService

router = APIRouter()


@router.get(
    "/broken-links",
    response_model=list[BrokenLink],
    summary="List broken links",
    description="Wiki-links whose title matches no article yet, newest first.",
)
async def list_broken_links(
    limit: int | None = Query(default=None, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
) -> list[BrokenLink]:
    """List orphan links with the articles containing them."""
    links = await LinkGraphService(db).list_broken_links(limit=limit)
    return [BrokenLink.model_validate(link) for link in links]


@router.get(
    "/unlinked",
    response_model=list[ArticleSummary],
    summary="List unlinked articles",
    description="Published articles that no other article links to.",
)
async def list_unlinked_articles(
    limit: int = Query(default=20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> list[ArticleSummary]:
    """List published articles without backlinks."""
    articles = await LinkGraphService(db).list_unlinked_articles(limit=limit)
    return [ArticleSummary.model_validate(a) for a in articles]


@router.get(
    "/stats",
    response_model=GraphStatsResponse,
    summary="Graph statistics",
)
async def get_graph_stats(db: AsyncSession = Depends(get_db)) -> GraphStatsResponse:
    stats = await LinkGraphService(db).graph_stats()
    return GraphStatsResponse.model_validate(stats)
