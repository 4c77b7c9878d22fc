"""
ArticleVersion model: one immutable snapshot in an article's history.

Versions for an article form the contiguous sequence 1..N. They are only
ever inserted; a revert appends a copy of an older snapshot instead of
removing anything.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Text, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wikigraph.db.base import Base, CreatedAtMixin, UUIDMixin
from wikigraph.db.enums import ArticleStatus, ChangeType

if TYPE_CHECKING:
    from wikigraph.db.models.article import Article


class ArticleVersion(UUIDMixin, CreatedAtMixin, Base):
    """
    A snapshot of (title, content, status) tagged with a change type.

    Attributes:
        id: UUID7 primary key
        article_id: Owning article
        version: 1-based number, strictly increasing per article
        title / content / status: Snapshot fields
        change_type: CREATE, UPDATE or REVERT
        change_summary: Optional human-readable summary
        author_id: User who made the change
        created_at: When the snapshot was appended

    Constraints:
        - (article_id, version) must be unique
        - version >= 1
    """

    article_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning article",
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="1-based version number per article",
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    status: Mapped[ArticleStatus] = mapped_column(
        SAEnum(ArticleStatus, name="articlestatus"),
        nullable=False,
    )

    change_type: Mapped[ChangeType] = mapped_column(
        SAEnum(ChangeType, name="changetype"),
        nullable=False,
        comment="CREATE, UPDATE or REVERT",
    )

    change_summary: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Optional summary of the change",
    )

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        comment="User who made the change",
    )

    article: Mapped["Article"] = relationship("Article", lazy="raise")

    __table_args__ = (
        # A lost append race surfaces as a unique violation
        Index(
            "uq_article_versions_article_id_version",
            "article_id",
            "version",
            unique=True,
        ),
        CheckConstraint("version >= 1", name="version_positive"),
    )

    def __repr__(self) -> str:
        return f"<ArticleVersion(article={self.article_id}, v{self.version}, {self.change_type.value})>"
