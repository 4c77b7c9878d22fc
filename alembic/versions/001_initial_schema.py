"""Initial schema - create the content graph tables.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

This migration creates the complete content graph schema:
- articles: live article state (title, slug, content, status)
- article_links: wiki-link edges, resolved or orphaned
- article_versions: append-only revision log
- audit_logs: record of article deletions

It also creates:
- ENUM types for article status and version change type
- The partial index used for orphan link lookup
- All constraints for data integrity
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables, enums, indexes, and constraints."""

    # ==========================================================================
    # Create ENUM types
    # ==========================================================================

    article_status_enum = postgresql.ENUM(
        "DRAFT",
        "PUBLISHED",
        name="articlestatus",
        create_type=False,
    )
    article_status_enum.create(op.get_bind(), checkfirst=True)

    change_type_enum = postgresql.ENUM(
        "CREATE",
        "UPDATE",
        "REVERT",
        name="changetype",
        create_type=False,
    )
    change_type_enum.create(op.get_bind(), checkfirst=True)

    # ==========================================================================
    # Create tables
    # ==========================================================================

    # --------------------------------------------------------------------------
    # articles table
    # --------------------------------------------------------------------------
    op.create_table(
        "articles",
        sa.Column("id", sa.UUID(), nullable=False, comment="UUID7 primary key"),
        sa.Column("title", sa.Text(), nullable=False, comment="Display title"),
        sa.Column(
            "title_key",
            sa.Text(),
            nullable=False,
            comment="Lower-cased title for case-insensitive lookup",
        ),
        sa.Column(
            "slug",
            sa.String(length=120),
            nullable=False,
            comment="URL-safe unique identifier",
        ),
        sa.Column("content", sa.Text(), nullable=False, comment="Markdown body"),
        sa.Column(
            "status",
            article_status_enum,
            nullable=False,
            comment="Publication state",
        ),
        sa.Column(
            "author_id", sa.UUID(), nullable=False, comment="User who created the article"
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_articles"),
    )
    op.create_index("ix_articles_title_key", "articles", ["title_key"], unique=False)
    op.create_index("ix_articles_slug", "articles", ["slug"], unique=True)
    op.create_index("ix_articles_status", "articles", ["status"], unique=False)
    op.create_index("ix_articles_updated_at", "articles", ["updated_at"], unique=False)

    # --------------------------------------------------------------------------
    # article_links table
    # --------------------------------------------------------------------------
    op.create_table(
        "article_links",
        sa.Column("id", sa.UUID(), nullable=False, comment="UUID7 primary key"),
        sa.Column(
            "source_id", sa.UUID(), nullable=False, comment="Article containing the reference"
        ),
        sa.Column(
            "target_id",
            sa.UUID(),
            nullable=True,
            comment="Resolved target article (NULL for orphan links)",
        ),
        sa.Column("target_title", sa.Text(), nullable=False, comment="Literal reference title"),
        sa.Column(
            "target_key",
            sa.Text(),
            nullable=False,
            comment="Lower-cased reference title for orphan matching",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["source_id"],
            ["articles.id"],
            name="fk_article_links_source_id_articles",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["target_id"],
            ["articles.id"],
            name="fk_article_links_target_id_articles",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_article_links"),
    )
    op.create_index("ix_article_links_source_id", "article_links", ["source_id"], unique=False)
    op.create_index("ix_article_links_target_id", "article_links", ["target_id"], unique=False)
    op.create_index(
        "uq_article_links_source_target_title",
        "article_links",
        ["source_id", "target_title"],
        unique=True,
    )
    op.create_index(
        "ix_article_links_orphan_key",
        "article_links",
        ["target_key"],
        unique=False,
        postgresql_where=sa.text("target_id IS NULL"),
    )

    # --------------------------------------------------------------------------
    # article_versions table
    # --------------------------------------------------------------------------
    op.create_table(
        "article_versions",
        sa.Column("id", sa.UUID(), nullable=False, comment="UUID7 primary key"),
        sa.Column("article_id", sa.UUID(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", article_status_enum, nullable=False),
        sa.Column("change_type", change_type_enum, nullable=False),
        sa.Column("change_summary", sa.Text(), nullable=True),
        sa.Column("author_id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "version >= 1", name="ck_article_versions_version_positive"
        ),
        sa.ForeignKeyConstraint(
            ["article_id"],
            ["articles.id"],
            name="fk_article_versions_article_id_articles",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_article_versions"),
    )
    op.create_index(
        "ix_article_versions_article_id", "article_versions", ["article_id"], unique=False
    )
    op.create_index(
        "uq_article_versions_article_id_version",
        "article_versions",
        ["article_id", "version"],
        unique=True,
    )

    # --------------------------------------------------------------------------
    # audit_logs table
    # --------------------------------------------------------------------------
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.UUID(), nullable=False, comment="UUID7 primary key"),
        sa.Column(
            "table_name",
            sa.String(length=100),
            nullable=False,
            comment="Name of the affected table",
        ),
        sa.Column(
            "record_id", sa.UUID(), nullable=False, comment="UUID of the affected record"
        ),
        sa.Column("action", sa.String(length=20), nullable=False, comment="Type of action"),
        sa.Column(
            "actor_id",
            sa.UUID(),
            nullable=True,
            comment="User who performed the action, when known",
        ),
        sa.Column(
            "old_data",
            sa.JSON(),
            nullable=True,
            comment="Record state before the action",
        ),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_audit_logs"),
    )
    op.create_index(
        "ix_audit_logs_table_record",
        "audit_logs",
        ["table_name", "record_id"],
        unique=False,
    )


def downgrade() -> None:
    """Drop all tables and enums in reverse order."""

    # Drop tables in reverse dependency order
    op.drop_table("audit_logs")
    op.drop_table("article_versions")
    op.drop_table("article_links")
    op.drop_table("articles")

    # Drop enum types
    op.execute("DROP TYPE IF EXISTS changetype")
    op.execute("DROP TYPE IF EXISTS articlestatus")
