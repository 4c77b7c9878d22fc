"""
Database models for the content graph.

This package contains SQLAlchemy models for:
- Article: live document state (title, content, status, slug)
- ArticleLink: wiki-link graph edges, resolved or orphaned
- ArticleVersion: append-only revision log
- AuditLog: record of article deletions

All models inherit from the base classes in wikigraph.db.base and use
UUID7 primary keys and Python-side timestamps.
"""

from wikigraph.db.models.article import Article, make_title_key
from wikigraph.db.models.article_link import ArticleLink
from wikigraph.db.models.article_version import ArticleVersion
from wikigraph.db.models.audit_log import AuditAction, AuditLog

__all__ = [
    "Article",
    "ArticleLink",
    "ArticleVersion",
    "AuditAction",
    "AuditLog",
    "make_title_key",
]
