"""
Article model: the live, mutable state of a knowledge-base document.

Articles own their outgoing links and their version history. Incoming links
are not owned; they are discovered by querying `article_links.target_id`.

Key features:
- `slug` is unique (allocated by `services.slugs.allocate_slug`)
- `title_key` holds the lower-cased title for case-insensitive lookup,
  computed in Python so Cyrillic titles compare the same on every backend
"""

import uuid

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from wikigraph.db.base import Base, TimestampMixin, UUIDMixin
from wikigraph.db.enums import ArticleStatus


def make_title_key(title: str) -> str:
    """Case-insensitive comparison key for titles."""
    return (title or "").strip().lower()


class Article(UUIDMixin, TimestampMixin, Base):
    """
    A titled, content-bearing document with a revision history.

    Attributes:
        id: UUID7 primary key
        title: Display title
        title_key: Lower-cased title (kept in sync by a validator)
        slug: URL-safe unique identifier
        content: Markdown body with [[wiki-link]] references
        status: DRAFT or PUBLISHED
        author_id: User who created the article
        created_at / updated_at: Timestamps

    Example:
        article = Article(
            title="Тестовая статья",
            slug="testovaya-statya",
            content="See [[Other article]]",
            author_id=user_id,
        )
    """

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Display title",
    )

    title_key: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        index=True,
        comment="Lower-cased title for case-insensitive lookup",
    )

    slug: Mapped[str] = mapped_column(
        String(120),
        unique=True,
        nullable=False,
        index=True,
        comment="URL-safe unique identifier",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Markdown body",
    )

    status: Mapped[ArticleStatus] = mapped_column(
        SAEnum(ArticleStatus, name="articlestatus"),
        nullable=False,
        default=ArticleStatus.DRAFT,
        index=True,
        comment="Publication state",
    )

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        comment="User who created the article",
    )

    @validates("title")
    def _sync_title_key(self, _key: str, value: str) -> str:
        self.title_key = make_title_key(value)
        return value

    def __repr__(self) -> str:
        return f"<Article(slug={self.slug!r}, title={self.title[:50]!r})>"


# Index for "recently updated" listings
Index("ix_articles_updated_at", Article.updated_at)
