"""
Revert an article to an earlier version.

A revert never rewrites history: it appends a REVERT version that copies the
target snapshot and makes that snapshot the live article state again. The
version append, the article overwrite and the link-graph sync of the
restored content happen in one transaction, so a failed revert leaves both
the article and its history exactly as they were.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.core.logging import get_logger
from wikigraph.db.enums import ChangeType
from wikigraph.db.models import Article, ArticleVersion
from wikigraph.db.session import transaction
from wikigraph.services.link_graph import LinkGraphService
from wikigraph.services.locks import ArticleLockRegistry, lock_article_row, maybe_hold
from wikigraph.services.revisions import RevisionLog, Snapshot

logger = get_logger(__name__)


def revert_summary(version_number: int) -> str:
    """Change summary recorded on a REVERT version."""
    return f"Reverted to version {version_number}"


@dataclass
class RevertResult:
    """The live article after a revert and the version the revert appended."""

    article: Article
    version: ArticleVersion


class RevertService:
    """
    Usage:
        result = await RevertService(db, locks).revert(article_id, version_id, user_id)
        result.version.version      # new max version number
        result.article.content      # restored content
    """

    def __init__(self, db: AsyncSession, locks: ArticleLockRegistry | None = None):
        self.db = db
        self.locks = locks
        self.revisions = RevisionLog(db)
        self.links = LinkGraphService(db)

    async def revert(
        self,
        article_id: UUID,
        version_id: UUID,
        user_id: UUID,
    ) -> RevertResult:
        """
        Restore `article_id` to the snapshot of `version_id`.

        Args:
            article_id: Article to revert
            version_id: Version whose snapshot becomes current again
            user_id: Acting user, recorded as the REVERT version's author

        Returns:
            RevertResult with the updated article and the appended version

        Raises:
            NotFoundError: If the article or the version does not exist
            VersionArticleMismatchError: If the version belongs to another article
            ConflictError / StoreFailure: If the store rejects the transaction
        """
        async with maybe_hold(self.locks, article_id):
            async with transaction(self.db):
                article = await lock_article_row(self.db, article_id)
                target = await self.revisions.get(article_id, version_id)
                snapshot = Snapshot.of(target)

                version = await self.revisions.append(
                    article_id,
                    snapshot,
                    ChangeType.REVERT,
                    user_id,
                    summary=revert_summary(target.version),
                )

                article.title = snapshot.title
                article.content = snapshot.content
                article.status = snapshot.status
                await self.db.flush()

                await self.links.sync_links(article_id, snapshot.content)

        logger.info(
            "Article reverted",
            article_id=str(article_id),
            target_version=target.version,
            new_version=version.version,
        )

        # The restored title may match orphan links written since
        await self.links.on_article_created_or_renamed(article.id, article.title)

        return RevertResult(article=article, version=version)
