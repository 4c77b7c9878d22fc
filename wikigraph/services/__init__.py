"""
Services package - the content graph and revision engine.

This package contains:
- Slug normalization and allocation
- Wiki-link reference extraction
- Link graph synchronization, orphan back-fill and graph queries
- Append-only revision log with line diffs
- Atomic revert
- Article write orchestration and markdown import
- Per-article write serialization
"""

from wikigraph.services.articles import ArticleService
from wikigraph.services.importer import (
    MarkdownImporter,
    ParsedMarkdown,
    split_front_matter,
    title_from_filename,
)
from wikigraph.services.link_graph import GraphStats, LinkGraphService
from wikigraph.services.locks import ArticleLockRegistry, lock_article_row, maybe_hold
from wikigraph.services.revert import RevertResult, RevertService, revert_summary
from wikigraph.services.revisions import (
    DiffKind,
    DiffSegment,
    RevisionLog,
    Snapshot,
    VersionDiff,
    diff_lines,
)
from wikigraph.services.slugs import (
    EMPTY_SLUG_FALLBACK,
    SLUG_MAX_LENGTH,
    allocate_slug,
    generate_slug,
    title_key,
    transliterate,
)
from wikigraph.services.wikilinks import (
    WIKILINK_RE,
    WikiLink,
    extract_wikilinks,
    wikilinks_to_markdown,
)

__all__ = [
    # Slugs
    "generate_slug",
    "title_key",
    "transliterate",
    "allocate_slug",
    "SLUG_MAX_LENGTH",
    "EMPTY_SLUG_FALLBACK",
    # Wiki-links
    "WikiLink",
    "WIKILINK_RE",
    "extract_wikilinks",
    "wikilinks_to_markdown",
    # Link graph
    "LinkGraphService",
    "GraphStats",
    # Revisions
    "RevisionLog",
    "Snapshot",
    "VersionDiff",
    "DiffSegment",
    "DiffKind",
    "diff_lines",
    # Revert
    "RevertService",
    "RevertResult",
    "revert_summary",
    # Articles
    "ArticleService",
    # Import
    "MarkdownImporter",
    "ParsedMarkdown",
    "split_front_matter",
    "title_from_filename",
    # Locks
    "ArticleLockRegistry",
    "lock_article_row",
    "maybe_hold",
]
