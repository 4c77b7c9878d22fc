"""Integration tests for reverting an article to an earlier version."""

from uuid import UUID

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from wikigraph.core.errors import NotFoundError, StoreFailure, VersionArticleMismatchError
from wikigraph.db import Article, ArticleLink, ArticleStatus, ChangeType
from wikigraph.services import (
    ArticleLockRegistry,
    ArticleService,
    RevertService,
    RevisionLog,
    Snapshot,
)

pytestmark = pytest.mark.asyncio


async def link_titles(db: AsyncSession, source_id: UUID) -> set[str]:
    result = await db.execute(
        select(ArticleLink)
        .where(ArticleLink.source_id == source_id)
        .execution_options(populate_existing=True)
    )
    return {link.target_title for link in result.scalars().all()}


async def link_target(db: AsyncSession, source_id: UUID) -> UUID | None:
    result = await db.execute(
        select(ArticleLink)
        .where(ArticleLink.source_id == source_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one().target_id


@pytest.fixture
async def history(article_service: ArticleService, user_id: UUID) -> Article:
    """An article with three versions, each linking somewhere else."""
    article = await article_service.create("Original", "first [[Alpha]]\n", user_id)
    await article_service.update(
        article.id, user_id, title="Second", content="second [[Beta]]\n"
    )
    await article_service.update(
        article.id,
        user_id,
        title="Third",
        content="third [[Gamma]]\n",
        status=ArticleStatus.PUBLISHED,
    )
    return article


class TestRevert:
    """Tests for RevertService.revert."""

    async def test_revert_appends_a_revert_version(
        self,
        db_session: AsyncSession,
        locks: ArticleLockRegistry,
        history: Article,
        user_id: UUID,
    ) -> None:
        log = RevisionLog(db_session)
        v1 = await log.get_by_number(history.id, 1)

        result = await RevertService(db_session, locks).revert(history.id, v1.id, user_id)

        assert result.version.version == 4
        assert result.version.change_type == ChangeType.REVERT
        assert result.version.change_summary == "Reverted to version 1"
        assert result.version.author_id == user_id
        assert Snapshot.of(result.version) == Snapshot.of(v1)
        assert await log.max_version(history.id) == 4

    async def test_article_takes_the_target_snapshot(
        self,
        db_session: AsyncSession,
        locks: ArticleLockRegistry,
        history: Article,
        user_id: UUID,
    ) -> None:
        v1 = await RevisionLog(db_session).get_by_number(history.id, 1)

        result = await RevertService(db_session, locks).revert(history.id, v1.id, user_id)

        assert result.article.title == "Original"
        assert result.article.content == "first [[Alpha]]\n"
        assert result.article.status == ArticleStatus.DRAFT
        # The slug does not follow the title back
        assert result.article.slug == history.slug

    async def test_links_follow_the_restored_content(
        self,
        db_session: AsyncSession,
        locks: ArticleLockRegistry,
        history: Article,
        user_id: UUID,
    ) -> None:
        assert await link_titles(db_session, history.id) == {"Gamma"}
        v1 = await RevisionLog(db_session).get_by_number(history.id, 1)

        await RevertService(db_session, locks).revert(history.id, v1.id, user_id)

        assert await link_titles(db_session, history.id) == {"Alpha"}

    async def test_reverting_to_latest_still_appends(
        self,
        db_session: AsyncSession,
        locks: ArticleLockRegistry,
        history: Article,
        user_id: UUID,
    ) -> None:
        v3 = await RevisionLog(db_session).get_by_number(history.id, 3)

        result = await RevertService(db_session, locks).revert(history.id, v3.id, user_id)

        assert result.version.version == 4
        assert result.article.title == "Third"

    async def test_restored_title_resolves_orphans(
        self,
        db_session: AsyncSession,
        locks: ArticleLockRegistry,
        article_service: ArticleService,
        history: Article,
        user_id: UUID,
    ) -> None:
        source = await article_service.create("Source", "[[Second]]", user_id)
        assert await link_target(db_session, source.id) is None
        v2 = await RevisionLog(db_session).get_by_number(history.id, 2)

        await RevertService(db_session, locks).revert(history.id, v2.id, user_id)

        assert await link_target(db_session, source.id) == history.id

    async def test_failed_revert_changes_nothing(
        self,
        db_session: AsyncSession,
        locks: ArticleLockRegistry,
        history: Article,
        user_id: UUID,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Version append, article overwrite and link sync roll back together."""
        article_id = history.id
        v1 = await RevisionLog(db_session).get_by_number(article_id, 1)
        v1_id = v1.id
        service = RevertService(db_session, locks)

        async def failing_sync(*_args, **_kwargs):
            raise StoreFailure("link store down")

        monkeypatch.setattr(service.links, "sync_links", failing_sync)

        with pytest.raises(StoreFailure):
            await service.revert(article_id, v1_id, user_id)

        article = await db_session.get(Article, article_id, populate_existing=True)
        assert article.title == "Third"
        assert article.content == "third [[Gamma]]\n"
        assert await RevisionLog(db_session).max_version(article_id) == 3
        assert await link_titles(db_session, article_id) == {"Gamma"}
        assert not locks.is_locked(article_id)

    async def test_version_of_another_article(
        self,
        db_session: AsyncSession,
        locks: ArticleLockRegistry,
        article_service: ArticleService,
        history: Article,
        user_id: UUID,
    ) -> None:
        article_id = history.id
        other = await article_service.create("Other", "", user_id)
        foreign = await RevisionLog(db_session).latest(other.id)

        with pytest.raises(VersionArticleMismatchError):
            await RevertService(db_session, locks).revert(article_id, foreign.id, user_id)

        assert await RevisionLog(db_session).max_version(article_id) == 3

    async def test_unknown_article(
        self, db_session: AsyncSession, locks: ArticleLockRegistry, user_id: UUID
    ) -> None:
        with pytest.raises(NotFoundError):
            await RevertService(db_session, locks).revert(uuid7(), uuid7(), user_id)

    async def test_unknown_version(
        self,
        db_session: AsyncSession,
        locks: ArticleLockRegistry,
        history: Article,
        user_id: UUID,
    ) -> None:
        with pytest.raises(NotFoundError):
            await RevertService(db_session, locks).revert(history.id, uuid7(), user_id)
