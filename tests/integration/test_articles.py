"""Integration tests for ArticleService writes, lookups and markdown import."""

from uuid import UUID

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from wikigraph.core.errors import ConflictError, NotFoundError, ValidationError
from wikigraph.db import (
    Article,
    ArticleLink,
    ArticleStatus,
    ArticleVersion,
    AuditAction,
    AuditLog,
    transaction,
)
from wikigraph.services import ArticleLockRegistry, ArticleService, MarkdownImporter, RevisionLog

pytestmark = pytest.mark.asyncio


class TestCreate:
    """Tests for ArticleService.create."""

    async def test_create_article(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create(
            "  Hello, World!  ",
            "Body with [[Link]]",
            user_id,
            status=ArticleStatus.PUBLISHED,
        )

        assert article.id is not None
        assert article.title == "Hello, World!"
        assert article.title_key == "hello, world!"
        assert article.slug == "hello-world"
        assert article.status == ArticleStatus.PUBLISHED
        assert article.author_id == user_id
        assert await article_service.link_count(article.id) == 1

    async def test_none_content_is_stored_empty(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Empty", None, user_id)

        assert article.content == ""
        assert article.status == ArticleStatus.DRAFT

    async def test_blank_title_is_rejected(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        with pytest.raises(ValidationError):
            await article_service.create("   ", "body", user_id)

        assert await article_service.count() == 0

    async def test_duplicate_titles_get_suffixed_slugs(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        slugs = [
            (await article_service.create("Same Title", "", user_id)).slug
            for _ in range(3)
        ]

        assert slugs == ["same-title", "same-title-1", "same-title-2"]

    async def test_title_without_slug_characters(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("!!!", "", user_id)

        assert article.slug == "untitled"

    async def test_change_summary_is_recorded(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Python", "", user_id, change_summary="first")

        version = await RevisionLog(db_session).latest(article.id)
        assert version.change_summary == "first"

    async def test_duplicate_slug_insert_is_conflict(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        """A lost slug allocation race surfaces as ConflictError."""
        await article_service.create("Taken", "", user_id)

        with pytest.raises(ConflictError):
            async with transaction(db_session):
                db_session.add(Article(title="Other", slug="taken", content="", author_id=user_id))

        assert await article_service.count() == 1


class TestUpdate:
    """Tests for ArticleService.update."""

    async def test_content_update_resyncs_links(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Python", "[[Old]]", user_id)

        await article_service.update(article.id, user_id, content="[[New]] [[Newer]]")

        result = await db_session.execute(
            select(ArticleLink.target_title).where(ArticleLink.source_id == article.id)
        )
        assert set(result.scalars().all()) == {"New", "Newer"}

    async def test_title_only_update_keeps_links_and_slug(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Python", "[[Asyncio]]", user_id)

        updated = await article_service.update(article.id, user_id, title="Python 3")

        assert updated.title == "Python 3"
        assert updated.title_key == "python 3"
        assert updated.slug == "python"
        assert await article_service.link_count(article.id) == 1
        assert await RevisionLog(db_session).count(article.id) == 2

    async def test_no_op_update_returns_article(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Python", "body", user_id)

        same = await article_service.update(
            article.id, user_id, title="Python", content="body", status=ArticleStatus.DRAFT
        )

        assert same.id == article.id
        assert await RevisionLog(db_session).count(article.id) == 1

    async def test_blank_title_is_rejected(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Python", "", user_id)

        with pytest.raises(ValidationError):
            await article_service.update(article.id, user_id, title=" ")

        assert await RevisionLog(db_session).count(article.id) == 1

    async def test_unknown_article(self, article_service: ArticleService, user_id: UUID) -> None:
        with pytest.raises(NotFoundError):
            await article_service.update(uuid7(), user_id, content="x")

    async def test_lock_entry_is_released(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Python", "", user_id)

        await article_service.update(article.id, user_id, content="x")

        assert len(article_service.locks) == 0


class TestDelete:
    """Tests for ArticleService.delete."""

    async def test_delete_removes_article_history_and_links(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Doomed", "[[Somewhere]]", user_id)
        await article_service.update(article.id, user_id, content="[[Elsewhere]]")
        article_id = article.id

        await article_service.delete(article_id)

        assert await db_session.scalar(
            select(func.count(Article.id)).where(Article.id == article_id)
        ) == 0
        assert await db_session.scalar(
            select(func.count(ArticleVersion.id)).where(ArticleVersion.article_id == article_id)
        ) == 0
        assert await db_session.scalar(
            select(func.count(ArticleLink.id)).where(ArticleLink.source_id == article_id)
        ) == 0

    async def test_delete_writes_audit_entry(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Doomed", "last words", user_id)
        await article_service.update(article.id, user_id, content="final words")
        article_id = article.id

        await article_service.delete(article_id, actor_id=user_id)

        entry = (
            await db_session.execute(select(AuditLog).where(AuditLog.record_id == article_id))
        ).scalar_one()
        assert entry.action == AuditAction.DELETE
        assert entry.table_name == "articles"
        assert entry.actor_id == user_id
        assert entry.old_data["content"] == "final words"
        assert entry.reason == "Deleted with 2 versions"

    async def test_backlinks_become_orphans(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        target = await article_service.create("Target", "", user_id)
        source = await article_service.create("Source", "[[Target]]", user_id)

        await article_service.delete(target.id)

        link = (
            await db_session.execute(
                select(ArticleLink)
                .where(ArticleLink.source_id == source.id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert link.target_id is None
        assert link.target_title == "Target"

        recreated = await article_service.create("Target", "", user_id)
        await db_session.refresh(link)
        assert link.target_id == recreated.id

    async def test_backlinks_move_to_remaining_namesake(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        """Deleting one of two same-titled articles hands its backlinks to the other."""
        first = await article_service.create("Foo", "", user_id)
        second = await article_service.create("Foo", "", user_id)
        source = await article_service.create("Src", "[[Foo]]", user_id)
        first_id, second_id, source_id = first.id, second.id, source.id
        assert second.slug == "foo-1"

        await article_service.delete(first_id)

        link = (
            await db_session.execute(
                select(ArticleLink)
                .where(ArticleLink.source_id == source_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert link.target_id == second_id
        assert link.target_title == "Foo"

    async def test_backlinks_move_to_slug_match(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        """A remaining article whose slug matches the reference also takes over."""
        by_slug = await article_service.create("data_model", "", user_id)
        exact = await article_service.create("Data Model", "", user_id)
        source = await article_service.create("Src", "[[Data Model]]", user_id)
        exact_id, by_slug_id, source_id = exact.id, by_slug.id, source.id
        assert by_slug.slug == "data-model"
        assert exact.slug == "data-model-1"

        await article_service.delete(exact_id)

        link = (
            await db_session.execute(
                select(ArticleLink)
                .where(ArticleLink.source_id == source_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert link.target_id == by_slug_id

    async def test_unknown_article(self, article_service: ArticleService) -> None:
        with pytest.raises(NotFoundError):
            await article_service.delete(uuid7())


class TestLookups:
    """Tests for the read side of ArticleService."""

    async def test_get_by_id_or_slug(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Async IO", "", user_id)

        assert (await article_service.get_by_id_or_slug(str(article.id))).id == article.id
        assert (await article_service.get_by_id_or_slug("async-io")).id == article.id

        with pytest.raises(NotFoundError):
            await article_service.get_by_id_or_slug("missing")
        with pytest.raises(NotFoundError):
            await article_service.get_by_id_or_slug(str(uuid7()))

    async def test_get_unknown_id(self, article_service: ArticleService) -> None:
        with pytest.raises(NotFoundError):
            await article_service.get(uuid7())

    async def test_find_by_title_or_slug(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await article_service.create("Hello, World!", "", user_id)

        assert (await article_service.find_by_title_or_slug("HELLO, WORLD!")).id == article.id
        assert (await article_service.find_by_title_or_slug("hello world")).id == article.id
        assert await article_service.find_by_title_or_slug("Goodbye") is None
        assert await article_service.find_by_title_or_slug("   ") is None

    async def test_suggest_prefix_matches_first(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        for title in ["Learning Python", "Python", "Pythonic code", "Ruby"]:
            await article_service.create(title, "", user_id)

        titles = [article.title for article in await article_service.suggest("pyth")]

        assert titles == ["Python", "Pythonic code", "Learning Python"]

    async def test_suggest_prefix_match_survives_limit(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        """Prefix matches are ranked before the limit cuts the list."""
        for title in ["A py 0", "A py 1", "A py 2", "Python"]:
            await article_service.create(title, "", user_id)

        titles = [article.title for article in await article_service.suggest("py", limit=2)]

        assert titles == ["Python", "A py 0"]

    async def test_suggest_limit_and_blank_query(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        for i in range(5):
            await article_service.create(f"Note {i}", "", user_id)

        assert len(await article_service.suggest("note", limit=2)) == 2
        assert await article_service.suggest("  ") == []

    async def test_suggest_escapes_like_wildcards(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        await article_service.create("snake_case names", "", user_id)
        await article_service.create("snakeXcase names", "", user_id)

        titles = [article.title for article in await article_service.suggest("snake_case")]

        assert titles == ["snake_case names"]

    async def test_list_and_count_by_status(
        self, article_service: ArticleService, user_id: UUID
    ) -> None:
        draft = await article_service.create("Draft", "", user_id)
        published = await article_service.create(
            "Published", "", user_id, status=ArticleStatus.PUBLISHED
        )

        assert await article_service.count() == 2
        assert await article_service.count(ArticleStatus.PUBLISHED) == 1
        listed = await article_service.list(status=ArticleStatus.DRAFT)
        assert [a.id for a in listed] == [draft.id]
        assert {a.id for a in await article_service.list()} == {draft.id, published.id}


class TestMarkdownImport:
    """Tests for MarkdownImporter."""

    async def test_import_with_front_matter(
        self,
        db_session: AsyncSession,
        locks: ArticleLockRegistry,
        user_id: UUID,
        sample_markdown: str,
    ) -> None:
        article = await MarkdownImporter(db_session, locks).import_markdown(
            "asyncio.md", sample_markdown, user_id
        )

        assert article.title == "Asyncio basics"
        assert article.slug == "asyncio-basics"
        assert article.status == ArticleStatus.PUBLISHED
        assert article.content.startswith("# Asyncio\n")
        assert "tags:" not in article.content

        version = await RevisionLog(db_session).latest(article.id)
        assert version.version == 1
        assert version.change_summary == "Imported from asyncio.md"

        result = await db_session.execute(
            select(ArticleLink.target_title).where(ArticleLink.source_id == article.id)
        )
        assert set(result.scalars().all()) == {"Coroutines", "Tasks", "Python"}

    async def test_title_falls_back_to_filename(
        self, db_session: AsyncSession, user_id: UUID
    ) -> None:
        article = await MarkdownImporter(db_session).import_markdown(
            "notes/Event loop.md", "plain body", user_id
        )

        assert article.title == "Event loop"
        assert article.status == ArticleStatus.DRAFT
        assert article.content == "plain body"

    async def test_convert_wikilinks(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        article = await MarkdownImporter(db_session).import_markdown(
            "Page.md", "See [[Other Page|the other one]].", user_id, convert_wikilinks=True
        )

        assert "[[" not in article.content
        assert await article_service.link_count(article.id) == 0

    async def test_import_resolves_existing_orphans(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        source = await article_service.create("Index", "[[Imported]]", user_id)

        article = await MarkdownImporter(db_session).import_markdown(
            "Imported.md", "", user_id
        )

        link = (
            await db_session.execute(
                select(ArticleLink)
                .where(ArticleLink.source_id == source.id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert link.target_id == article.id

    async def test_invalid_front_matter_creates_nothing(
        self, db_session: AsyncSession, article_service: ArticleService, user_id: UUID
    ) -> None:
        with pytest.raises(ValidationError):
            await MarkdownImporter(db_session).import_markdown(
                "bad.md", "---\n- just\n- a list\n---\nbody", user_id
            )

        assert await article_service.count() == 0

    async def test_untitled_file(self, db_session: AsyncSession, user_id: UUID) -> None:
        with pytest.raises(ValidationError):
            await MarkdownImporter(db_session).import_markdown(".md", "body", user_id)
