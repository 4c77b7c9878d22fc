"""
Article write orchestration and lookups.

Every article write is one transaction that keeps three things consistent:
- the live article row
- its revision log (one new version per successful write)
- its outgoing link set (recomputed whenever the content changes)

Creations and renames additionally back-fill orphan links after the commit,
in a transaction of their own, so a failed back-fill never undoes the write.
"""

from uuid import UUID

from sqlalchemy import case, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.core.config import settings
from wikigraph.core.errors import NotFoundError, ValidationError
from wikigraph.core.logging import get_logger
from wikigraph.db.enums import ArticleStatus, ChangeType
from wikigraph.db.models import Article, ArticleLink, ArticleVersion, AuditLog
from wikigraph.db.session import transaction
from wikigraph.services.link_graph import LinkGraphService
from wikigraph.services.locks import ArticleLockRegistry, lock_article_row, maybe_hold
from wikigraph.services.revisions import RevisionLog, Snapshot
from wikigraph.services.slugs import allocate_slug, generate_slug, title_key

logger = get_logger(__name__)


def _clean_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Article title must not be blank")
    return cleaned


def _parse_uuid(value: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        return None


class ArticleService:
    """
    Document store boundary plus the save handler around it.

    Usage:
        service = ArticleService(db, locks)

        article = await service.create("Python", "See [[Asyncio]]", author_id)
        article = await service.update(article.id, author_id, content="...")
        await service.delete(article.id)
    """

    def __init__(self, db: AsyncSession, locks: ArticleLockRegistry | None = None):
        """
        Initialize article service.

        Args:
            db: Database session
            locks: Per-article lock registry shared by the application
        """
        self.db = db
        self.locks = locks
        self.links = LinkGraphService(db)
        self.revisions = RevisionLog(db)

    # =========================================================================
    # Writes
    # =========================================================================

    async def create(
        self,
        title: str,
        content: str | None,
        author_id: UUID,
        status: ArticleStatus = ArticleStatus.DRAFT,
        change_summary: str | None = None,
    ) -> Article:
        """
        Create an article with version 1 and its outgoing links.

        Args:
            title: Display title (must not be blank)
            content: Markdown body
            author_id: Acting user
            status: Initial publication state
            change_summary: Optional summary recorded on version 1

        Returns:
            The created article

        Raises:
            ValidationError: If the title is blank
            ConflictError: If a concurrent create took the same slug
        """
        title = _clean_title(title)

        async with transaction(self.db):
            article = Article(
                title=title,
                slug=await allocate_slug(self.db, title),
                content=content or "",
                status=status,
                author_id=author_id,
            )
            self.db.add(article)
            await self.db.flush()

            await self.revisions.append(
                article.id,
                Snapshot.of(article),
                ChangeType.CREATE,
                author_id,
                summary=change_summary,
            )
            links = await self.links.create_links(article.id, article.content)

        logger.info(
            "Article created",
            article_id=str(article.id),
            slug=article.slug,
            links=len(links),
        )

        await self.links.on_article_created_or_renamed(article.id, article.title)
        return article

    async def update(
        self,
        article_id: UUID,
        author_id: UUID,
        title: str | None = None,
        content: str | None = None,
        status: ArticleStatus | None = None,
        change_summary: str | None = None,
    ) -> Article:
        """
        Apply a partial update to an article.

        Fields left as None are unchanged. When nothing actually changes no
        version is appended and the article is returned as is. The slug is
        kept on rename so existing URLs stay valid.

        Raises:
            NotFoundError: If the article does not exist
            ValidationError: If the new title is blank
            ConflictError / StoreFailure: If the store rejects the transaction
        """
        if title is not None:
            title = _clean_title(title)

        async with maybe_hold(self.locks, article_id):
            async with transaction(self.db):
                article = await lock_article_row(self.db, article_id)

                title_changed = title is not None and title != article.title
                content_changed = content is not None and content != article.content
                status_changed = status is not None and status != article.status

                if not (title_changed or content_changed or status_changed):
                    logger.debug("Article update is a no-op", article_id=str(article_id))
                    return article

                if title_changed:
                    article.title = title
                if content_changed:
                    article.content = content
                if status_changed:
                    article.status = status
                await self.db.flush()

                version = await self.revisions.append(
                    article.id,
                    Snapshot.of(article),
                    ChangeType.UPDATE,
                    author_id,
                    summary=change_summary,
                )
                if content_changed:
                    await self.links.on_article_written(article.id, article.content)

        logger.info(
            "Article updated",
            article_id=str(article_id),
            version=version.version,
            title_changed=title_changed,
            content_changed=content_changed,
            status_changed=status_changed,
        )

        if title_changed:
            await self.links.on_article_created_or_renamed(article.id, article.title)
        return article

    async def delete(self, article_id: UUID, actor_id: UUID | None = None) -> None:
        """
        Delete an article together with its links and history.

        Links pointing at the article move to the oldest remaining article
        that matches their title, or become orphans again; the final
        snapshot is kept in the audit log, attributed to `actor_id`.

        Raises:
            NotFoundError: If the article does not exist
        """
        async with maybe_hold(self.locks, article_id):
            async with transaction(self.db):
                article = await lock_article_row(self.db, article_id)
                version_count = await self.revisions.count(article_id)

                self.db.add(AuditLog.article_deleted(article, version_count, actor_id))

                detached = await self.links.detach_incoming(article_id)
                removed = await self.links.delete_links(article_id)
                await self.db.execute(
                    delete(ArticleVersion).where(ArticleVersion.article_id == article_id)
                )
                await self.db.execute(delete(Article).where(Article.id == article_id))
                # Backlinks move to another article with the same title, if any
                reattached = await self.links.reattach(detached)

        logger.info(
            "Article deleted",
            article_id=str(article_id),
            versions=version_count,
            actor_id=str(actor_id) if actor_id else None,
            links_removed=removed,
            backlinks_detached=len(detached),
            backlinks_reattached=reattached,
        )

    # =========================================================================
    # Reads
    # =========================================================================

    async def get(self, article_id: UUID) -> Article:
        """
        Get an article by id.

        Raises:
            NotFoundError: If the article does not exist
        """
        article = await self.db.get(Article, article_id)
        if article is None:
            raise NotFoundError("Article", article_id)
        return article

    async def get_by_id_or_slug(self, ref: str) -> Article:
        """
        Get an article by UUID string or by slug.

        Raises:
            NotFoundError: If neither matches
        """
        article_id = _parse_uuid(ref)
        if article_id is not None:
            article = await self.db.get(Article, article_id)
            if article is not None:
                return article

        result = await self.db.execute(select(Article).where(Article.slug == ref))
        article = result.scalar_one_or_none()
        if article is None:
            raise NotFoundError("Article", ref)
        return article

    async def find_by_title_or_slug(self, value: str) -> Article | None:
        """
        Find the article a reference text points at.

        Same rules as link resolution: case-insensitive title first, then
        slug, oldest article first among equals.
        """
        key = title_key(value)
        if not key:
            return None

        result = await self.db.execute(
            select(Article)
            .where(Article.title_key == key)
            .order_by(Article.created_at, Article.id)
            .limit(1)
        )
        article = result.scalar_one_or_none()
        if article is not None:
            return article

        slug = generate_slug(value)
        if not slug:
            return None
        result = await self.db.execute(select(Article).where(Article.slug == slug))
        return result.scalar_one_or_none()

    async def count(self, status: ArticleStatus | None = None) -> int:
        """Count articles, optionally by status."""
        query = select(func.count(Article.id))
        if status is not None:
            query = query.where(Article.status == status)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def suggest(self, q: str, limit: int | None = None) -> list[Article]:
        """
        Title suggestions for wiki-link autocomplete.

        Matches a case-insensitive title substring or a slug prefix; titles
        starting with the query come first.
        """
        key = title_key(q)
        if not key:
            return []

        conditions = [Article.title_key.contains(key, autoescape=True)]
        slug = generate_slug(q)
        if slug:
            conditions.append(Article.slug.startswith(slug, autoescape=True))

        prefix_first = case(
            (Article.title_key.startswith(key, autoescape=True), 0),
            else_=1,
        )
        result = await self.db.execute(
            select(Article)
            .where(or_(*conditions))
            .order_by(prefix_first, Article.title_key)
            .limit(limit or settings.suggestions_limit)
        )
        return list(result.scalars().all())

    async def link_count(self, article_id: UUID) -> int:
        """Number of outgoing links of an article."""
        result = await self.db.execute(
            select(func.count(ArticleLink.id)).where(ArticleLink.source_id == article_id)
        )
        return result.scalar() or 0

    async def list(
        self,
        status: ArticleStatus | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> list[Article]:
        """List articles, most recently updated first."""
        query = select(Article)
        if status is not None:
            query = query.where(Article.status == status)
        query = query.order_by(Article.updated_at.desc(), Article.id.desc())
        result = await self.db.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all())
