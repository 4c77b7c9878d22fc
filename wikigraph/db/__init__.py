"""
Database package - SQLAlchemy models, session management, and utilities.

Usage:
    from wikigraph.db import Base, get_db, get_db_context, transaction
    from wikigraph.db import Article, ArticleLink, ArticleVersion
    from wikigraph.db import ArticleStatus, ChangeType
"""

from wikigraph.db.base import (
    AsyncSessionLocal,
    Base,
    CreatedAtMixin,
    TimestampMixin,
    UUIDMixin,
    build_engine,
    dispose_engine,
    drop_db,
    engine,
    init_db,
    metadata,
    utcnow,
)
from wikigraph.db.enums import ArticleStatus, ChangeType
from wikigraph.db.models import (
    Article,
    ArticleLink,
    ArticleVersion,
    AuditAction,
    AuditLog,
    make_title_key,
)
from wikigraph.db.session import (
    get_db,
    get_db_context,
    transaction,
    translate_store_error,
)

__all__ = [
    # Base classes
    "Base",
    # Mixins
    "UUIDMixin",
    "TimestampMixin",
    "CreatedAtMixin",
    # Enums
    "ArticleStatus",
    "ChangeType",
    # Models
    "Article",
    "ArticleLink",
    "ArticleVersion",
    "AuditAction",
    "AuditLog",
    "make_title_key",
    # Engine and factory
    "engine",
    "build_engine",
    "AsyncSessionLocal",
    "metadata",
    "utcnow",
    # Session utilities
    "get_db",
    "get_db_context",
    "transaction",
    "translate_store_error",
    # Lifecycle
    "init_db",
    "drop_db",
    "dispose_engine",
]
