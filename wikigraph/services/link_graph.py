"""
Wiki-link graph maintenance.

This module keeps the `article_links` table equal to what the articles'
current content says:

- Synchronization: an article's outgoing edge set is recomputed wholesale
  from its latest content (delete all, insert all) on every content write
- Resolution: each reference resolves to an existing article by
  case-insensitive exact title, or failing that by slug; unresolved
  references are stored as orphan edges with the literal title
- Orphan back-fill: when an article is created or renamed, orphan edges
  whose title matches it are attached to it
- Read side: outgoing links, backlinks, broken-link and unlinked-article
  reports

Write methods only flush; the caller owns the transaction, so the delete and
insert phases of a sync commit or roll back together.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import delete, exists, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wikigraph.core.config import settings
from wikigraph.core.errors import ConflictError, StoreFailure
from wikigraph.core.logging import get_logger
from wikigraph.db.enums import ArticleStatus
from wikigraph.db.models import Article, ArticleLink
from wikigraph.db.session import transaction
from wikigraph.services.slugs import generate_slug, title_key
from wikigraph.services.wikilinks import WikiLink, extract_wikilinks

logger = get_logger(__name__)


@dataclass
class GraphStats:
    """Overall link graph counters."""

    article_count: int = 0
    link_count: int = 0
    resolved_link_count: int = 0
    orphan_link_count: int = 0


class LinkGraphService:
    """
    Service for maintaining and querying the wiki-link graph.

    Usage:
        links = LinkGraphService(db)

        async with transaction(db):
            await links.sync_links(article.id, article.content)

        # After the creating / renaming transaction committed
        await links.on_article_created_or_renamed(article.id, article.title)
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize link graph service.

        Args:
            db: Database session
        """
        self.db = db

    # =========================================================================
    # Resolution
    # =========================================================================

    async def resolve_titles(self, titles: Iterable[str]) -> dict[str, UUID | None]:
        """
        Resolve reference titles to article ids with a single query.

        Matching rules, in priority order:
        1. Case-insensitive exact title
        2. Slug of the reference equals the article's slug

        When several articles share a title key (or slug) the oldest one
        wins, so resolution is deterministic.

        Args:
            titles: Literal reference titles

        Returns:
            Mapping title -> article id, or None when nothing matches
        """
        unique_titles = list(dict.fromkeys(titles))
        if not unique_titles:
            return {}

        keys = {title_key(t) for t in unique_titles}
        slugs = {generate_slug(t) for t in unique_titles} - {""}

        conditions = [Article.title_key.in_(keys)]
        if slugs:
            conditions.append(Article.slug.in_(slugs))

        result = await self.db.execute(
            select(Article.id, Article.title_key, Article.slug)
            .where(or_(*conditions))
            .order_by(Article.created_at, Article.id)
        )

        by_title: dict[str, UUID] = {}
        by_slug: dict[str, UUID] = {}
        for row in result.all():
            by_title.setdefault(row.title_key, row.id)
            by_slug.setdefault(row.slug, row.id)

        resolved: dict[str, UUID | None] = {}
        for title in unique_titles:
            target_id = by_title.get(title_key(title))
            if target_id is None:
                slug = generate_slug(title)
                target_id = by_slug.get(slug) if slug else None
            resolved[title] = target_id

        return resolved

    # =========================================================================
    # Synchronization
    # =========================================================================

    async def sync_links(self, source_id: UUID, content: str | None) -> list[ArticleLink]:
        """
        Replace all outgoing links of `source_id` with those of `content`.

        Must run inside the caller's transaction together with the content
        write it belongs to.

        Args:
            source_id: Article whose content changed
            content: The article's new content

        Returns:
            The new edge set, in reference order
        """
        removed = await self.delete_links(source_id)
        links = await self._insert_links(source_id, content)

        logger.info(
            "Article links synced",
            article_id=str(source_id),
            removed=removed,
            links=len(links),
            orphans=sum(1 for link in links if link.is_orphan),
        )
        return links

    async def create_links(self, source_id: UUID, content: str | None) -> list[ArticleLink]:
        """
        Insert the links of a brand-new article (no delete phase).

        Equivalent to `sync_links` for an article that has no edges yet.
        """
        links = await self._insert_links(source_id, content)
        logger.debug("Article links created", article_id=str(source_id), links=len(links))
        return links

    async def on_article_written(self, article_id: UUID, content: str | None) -> list[ArticleLink]:
        """Document-save hook: recompute the outgoing edges of a written article."""
        return await self.sync_links(article_id, content)

    async def delete_links(self, source_id: UUID) -> int:
        """Delete every outgoing link of `source_id`. Returns the number removed."""
        result = await self.db.execute(
            delete(ArticleLink).where(ArticleLink.source_id == source_id)
        )
        return result.rowcount or 0

    async def _insert_links(self, source_id: UUID, content: str | None) -> list[ArticleLink]:
        references = extract_wikilinks(content)
        if not references:
            return []

        resolved = await self.resolve_titles(ref.title for ref in references)
        links = [self._build_link(source_id, ref, resolved[ref.title]) for ref in references]

        self.db.add_all(links)
        await self.db.flush()
        return links

    @staticmethod
    def _build_link(source_id: UUID, ref: WikiLink, target_id: UUID | None) -> ArticleLink:
        return ArticleLink(
            source_id=source_id,
            target_id=target_id,
            target_title=ref.title,
        )

    # =========================================================================
    # Orphan back-fill
    # =========================================================================

    async def resolve_orphans(self, article_id: UUID, title: str) -> int:
        """
        Attach orphan links whose title matches `title` to `article_id`.

        An orphan matches when its lower-cased title equals the lower-cased
        `title` or equals the slug of `title`. Already resolved links are
        never touched, so running this twice has no further effect.

        Returns:
            Number of links resolved
        """
        keys = {title_key(title)}
        slug = generate_slug(title)
        if slug:
            keys.add(slug)
        keys.discard("")
        if not keys:
            return 0

        result = await self.db.execute(
            update(ArticleLink)
            .where(
                ArticleLink.target_id.is_(None),
                ArticleLink.target_key.in_(keys),
            )
            .values(target_id=article_id)
        )
        return result.rowcount or 0

    async def on_article_created_or_renamed(self, article_id: UUID, title: str) -> int:
        """
        Create/rename hook: back-fill orphan links in a transaction of its own.

        Call after the triggering write committed. A failure here is logged
        and skipped; it never undoes the triggering write, and the affected
        links resolve on the next edit of their source articles.

        Returns:
            Number of links resolved (0 when skipped)
        """
        try:
            async with transaction(self.db):
                resolved = await self.resolve_orphans(article_id, title)
        except (ConflictError, StoreFailure) as exc:
            logger.warning(
                "Orphan link resolution skipped",
                article_id=str(article_id),
                title=title,
                error=str(exc),
            )
            return 0

        if resolved:
            logger.info("Orphan links resolved", article_id=str(article_id), resolved=resolved)
        return resolved

    async def detach_incoming(self, article_id: UUID) -> list[str]:
        """
        Turn every link pointing at `article_id` back into an orphan.

        Used before deleting an article: the literal titles stay, so the
        links resolve again if a matching article is created later.

        Returns:
            The target titles of the detached links, one entry per link
        """
        titles = list(
            (
                await self.db.execute(
                    select(ArticleLink.target_title).where(ArticleLink.target_id == article_id)
                )
            ).scalars()
        )
        await self.db.execute(
            update(ArticleLink)
            .where(ArticleLink.target_id == article_id)
            .values(target_id=None)
        )
        return titles

    async def reattach(self, titles: Iterable[str]) -> int:
        """
        Resolve orphan links titled `titles` against the remaining articles.

        Run after a deleted article's row is gone: another article sharing
        its title (or slug) takes over the links that pointed at it.

        Returns:
            Number of links resolved
        """
        resolved = await self.resolve_titles(titles)
        attached = 0
        for title, target_id in resolved.items():
            if target_id is None:
                continue
            result = await self.db.execute(
                update(ArticleLink)
                .where(
                    ArticleLink.target_id.is_(None),
                    ArticleLink.target_title == title,
                )
                .values(target_id=target_id)
            )
            attached += result.rowcount or 0
        return attached

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_outgoing(self, article_id: UUID) -> list[ArticleLink]:
        """Outgoing links of an article, in reference order, with targets loaded."""
        result = await self.db.execute(
            select(ArticleLink)
            .options(selectinload(ArticleLink.target))
            .where(ArticleLink.source_id == article_id)
            .order_by(ArticleLink.created_at, ArticleLink.id)
        )
        return list(result.scalars().all())

    async def get_backlinks(self, article_id: UUID) -> list[ArticleLink]:
        """Incoming links of an article with their source articles, newest first."""
        result = await self.db.execute(
            select(ArticleLink)
            .options(selectinload(ArticleLink.source))
            .where(ArticleLink.target_id == article_id)
            .order_by(ArticleLink.created_at.desc(), ArticleLink.id.desc())
        )
        return list(result.scalars().all())

    async def list_broken_links(self, limit: int | None = None) -> list[ArticleLink]:
        """Orphan links with their source articles, newest first."""
        result = await self.db.execute(
            select(ArticleLink)
            .options(selectinload(ArticleLink.source))
            .where(ArticleLink.target_id.is_(None))
            .order_by(ArticleLink.created_at.desc(), ArticleLink.id.desc())
            .limit(limit or settings.broken_links_limit)
        )
        return list(result.scalars().all())

    async def list_unlinked_articles(self, limit: int = 20) -> list[Article]:
        """Published articles that no link points to."""
        has_incoming = exists().where(ArticleLink.target_id == Article.id)
        result = await self.db.execute(
            select(Article)
            .where(Article.status == ArticleStatus.PUBLISHED, ~has_incoming)
            .order_by(Article.updated_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def graph_stats(self) -> GraphStats:
        """Count articles, links and orphan links."""
        article_count = await self.db.scalar(select(func.count(Article.id)))
        link_count = await self.db.scalar(select(func.count(ArticleLink.id)))
        orphan_count = await self.db.scalar(
            select(func.count(ArticleLink.id)).where(ArticleLink.target_id.is_(None))
        )
        link_count = link_count or 0
        orphan_count = orphan_count or 0
        return GraphStats(
            article_count=article_count or 0,
            link_count=link_count,
            resolved_link_count=link_count - orphan_count,
            orphan_link_count=orphan_count,
        )
