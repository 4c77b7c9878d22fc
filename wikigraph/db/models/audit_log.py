"""
Audit trail for article deletions.

An article's versions are deleted together with the article. The entry
written here keeps the final snapshot, who deleted it and how much history
went with it.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from wikigraph.db.base import Base, UUIDMixin, utcnow

if TYPE_CHECKING:
    from wikigraph.db.models.article import Article


class AuditAction(str, Enum):
    DELETE = "DELETE"


class AuditLog(UUIDMixin, Base):
    """
    Append-only audit entry.

    `record_id` is not a foreign key: the record it names is usually gone.
    """

    table_name: Mapped[str] = mapped_column(String(100), nullable=False)

    record_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)

    action: Mapped[str] = mapped_column(String(20), nullable=False)

    actor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        comment="User who performed the action, when known",
    )

    old_data: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
        comment="Record state before the action",
    )

    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("ix_audit_logs_table_record", "table_name", "record_id"),
    )

    def __repr__(self) -> str:
        return f"<AuditLog({self.action} {self.table_name}/{self.record_id})>"

    @classmethod
    def article_deleted(
        cls,
        article: "Article",
        version_count: int,
        actor_id: uuid.UUID | None = None,
    ) -> "AuditLog":
        """Entry for an article about to be deleted, with its final snapshot."""
        return cls(
            table_name=article.__tablename__,
            record_id=article.id,
            action=AuditAction.DELETE.value,
            actor_id=actor_id,
            old_data=article.to_dict(),
            reason=f"Deleted with {version_count} versions",
        )
