"""
ArticleLink model: one persisted edge of the wiki-link graph.

Each link records the resolution state of one [[reference]] found in the
source article's content:
- `target_id` set: the reference resolved to an existing article
- `target_id` NULL: an orphan ("broken") link; `target_title` keeps the
  literal text so the link can be resolved when a matching article appears

Key features:
- Owned by the source article (cascade delete)
- Target deletion turns the edge back into an orphan (SET NULL)
- Unique (source_id, target_title): one edge per distinct reference
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from wikigraph.db.base import Base, CreatedAtMixin, UUIDMixin
from wikigraph.db.models.article import make_title_key

if TYPE_CHECKING:
    from wikigraph.db.models.article import Article


class ArticleLink(UUIDMixin, CreatedAtMixin, Base):
    """
    A directed edge source -> target between two articles.

    Attributes:
        id: UUID7 primary key
        source_id: Article whose content contains the reference
        target_id: Resolved article, or None for an orphan link
        target_title: Literal reference title as written
        target_key: Lower-cased target_title (orphan matching key)
        created_at: When the edge set containing this link was written

    Relationships:
        source: Source article
        target: Target article (None for orphans)

    Example:
        link = ArticleLink(
            source_id=article.id,
            target_id=None,
            target_title="Future article",
        )
    """

    source_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Article containing the reference",
    )

    target_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("articles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Resolved target article (NULL for orphan links)",
    )

    target_title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Literal reference title",
    )

    target_key: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Lower-cased reference title for orphan matching",
    )

    source: Mapped["Article"] = relationship(
        "Article",
        foreign_keys=[source_id],
        lazy="raise",
    )

    target: Mapped["Article | None"] = relationship(
        "Article",
        foreign_keys=[target_id],
        lazy="raise",
    )

    __table_args__ = (
        Index(
            "uq_article_links_source_target_title",
            "source_id",
            "target_title",
            unique=True,
        ),
        # Orphan lookup only ever scans unresolved rows
        Index(
            "ix_article_links_orphan_key",
            "target_key",
            postgresql_where=text("target_id IS NULL"),
            sqlite_where=text("target_id IS NULL"),
        ),
    )

    @validates("target_title")
    def _sync_target_key(self, _key: str, value: str) -> str:
        self.target_key = make_title_key(value)
        return value

    def __repr__(self) -> str:
        return f"<ArticleLink(source={self.source_id}, target={self.target_id}, title={self.target_title!r})>"

    @property
    def is_orphan(self) -> bool:
        """True while no article matches the reference."""
        return self.target_id is None
