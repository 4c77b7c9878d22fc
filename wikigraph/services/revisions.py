"""
Revision log: append-only, diffable article history.

Every successful article write appends one immutable snapshot
(title, content, status) with the next version number. Version numbers are
per article, start at 1 and increase by exactly one per append.

Features:
- Append inside the caller's write transaction
- Listing (newest first, paginated) and lookup by id or number
- Line-level content diff between two versions, or against the
  predecessor (an empty baseline for version 1)
"""

import difflib
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.core.errors import NotFoundError, VersionArticleMismatchError
from wikigraph.core.logging import get_logger
from wikigraph.db.enums import ArticleStatus, ChangeType
from wikigraph.db.models import ArticleVersion

logger = get_logger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class Snapshot:
    """The mirrored fields of an article at one point in time."""

    title: str
    content: str
    status: ArticleStatus

    @classmethod
    def of(cls, source) -> "Snapshot":
        """Build from anything with title/content/status (Article or ArticleVersion)."""
        return cls(title=source.title, content=source.content or "", status=source.status)


class DiffKind(str, Enum):
    """Kind of a diff segment."""

    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


@dataclass
class DiffSegment:
    """A run of consecutive lines sharing the same diff kind."""

    text: str
    kind: DiffKind
    count: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"text": self.text, "kind": self.kind.value, "count": self.count}


@dataclass
class VersionDiff:
    """Result of comparing a version with its baseline."""

    version: ArticleVersion
    compare_version: ArticleVersion | None
    title_changed: bool
    old_title: str | None
    new_title: str
    content: list[DiffSegment] = field(default_factory=list)

    @property
    def added_lines(self) -> int:
        return sum(s.count for s in self.content if s.kind == DiffKind.ADDED)

    @property
    def removed_lines(self) -> int:
        return sum(s.count for s in self.content if s.kind == DiffKind.REMOVED)

    @property
    def is_identical(self) -> bool:
        return not self.title_changed and all(
            s.kind == DiffKind.UNCHANGED for s in self.content
        )


# =============================================================================
# Pure diff
# =============================================================================


def diff_lines(old: str | None, new: str | None) -> list[DiffSegment]:
    """
    Line-oriented diff of two texts.

    Lines keep their line endings, so joining the text of all unchanged and
    added segments reproduces `new`, and of all unchanged and removed
    segments reproduces `old`. A replaced block is reported as its removed
    lines followed by its added lines; neighbouring segments of the same
    kind are merged.

    Args:
        old: Baseline text (None is treated as empty)
        new: Compared text (None is treated as empty)

    Returns:
        Ordered list of segments
    """
    old_lines = (old or "").splitlines(keepends=True)
    new_lines = (new or "").splitlines(keepends=True)

    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)
    segments: list[DiffSegment] = []

    def emit(lines: list[str], kind: DiffKind) -> None:
        if not lines:
            return
        if segments and segments[-1].kind == kind:
            segments[-1].text += "".join(lines)
            segments[-1].count += len(lines)
        else:
            segments.append(DiffSegment(text="".join(lines), kind=kind, count=len(lines)))

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            emit(old_lines[i1:i2], DiffKind.UNCHANGED)
        else:
            # "replace" yields both; "delete" / "insert" yield one side
            emit(old_lines[i1:i2], DiffKind.REMOVED)
            emit(new_lines[j1:j2], DiffKind.ADDED)

    return segments


# =============================================================================
# Revision Log
# =============================================================================


class RevisionLog:
    """
    Append-only version store for articles.

    Usage:
        log = RevisionLog(db)

        async with transaction(db):
            version = await log.append(
                article.id, Snapshot.of(article), ChangeType.UPDATE, user_id
            )

        diff = await log.diff(article.id, version.id)
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize revision log.

        Args:
            db: Database session
        """
        self.db = db

    async def max_version(self, article_id: UUID) -> int:
        """Highest version number of an article (0 when it has none)."""
        result = await self.db.execute(
            select(func.max(ArticleVersion.version)).where(
                ArticleVersion.article_id == article_id
            )
        )
        return result.scalar() or 0

    async def append(
        self,
        article_id: UUID,
        snapshot: Snapshot,
        change_type: ChangeType,
        author_id: UUID,
        summary: str | None = None,
    ) -> ArticleVersion:
        """
        Append the next version of an article.

        Must run in the same transaction as the article write it records.
        Two appends racing for the same number collide on the unique
        (article_id, version) index; the loser's transaction fails with
        ConflictError.

        Args:
            article_id: Owning article
            snapshot: Title, content and status to record
            change_type: CREATE, UPDATE or REVERT
            author_id: Acting user
            summary: Optional change summary

        Returns:
            The flushed version
        """
        number = await self.max_version(article_id) + 1

        version = ArticleVersion(
            article_id=article_id,
            version=number,
            title=snapshot.title,
            content=snapshot.content,
            status=snapshot.status,
            change_type=change_type,
            change_summary=summary,
            author_id=author_id,
        )
        self.db.add(version)
        await self.db.flush()

        logger.debug(
            "Version appended",
            article_id=str(article_id),
            version=number,
            change_type=change_type.value,
        )
        return version

    async def count(self, article_id: UUID) -> int:
        """Number of versions of an article."""
        result = await self.db.execute(
            select(func.count(ArticleVersion.id)).where(
                ArticleVersion.article_id == article_id
            )
        )
        return result.scalar() or 0

    async def list(
        self,
        article_id: UUID,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[ArticleVersion]:
        """Versions of an article, newest first."""
        query = (
            select(ArticleVersion)
            .where(ArticleVersion.article_id == article_id)
            .order_by(ArticleVersion.version.desc())
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def latest(self, article_id: UUID) -> ArticleVersion | None:
        """Most recent version of an article."""
        versions = await self.list(article_id, limit=1)
        return versions[0] if versions else None

    async def get(self, article_id: UUID, version_id: UUID) -> ArticleVersion:
        """
        Get a version of a given article.

        Raises:
            NotFoundError: If no version has this id
            VersionArticleMismatchError: If it belongs to another article
        """
        version = await self.db.get(ArticleVersion, version_id)
        if version is None:
            raise NotFoundError("Version", version_id)
        if version.article_id != article_id:
            raise VersionArticleMismatchError(version_id, article_id)
        return version

    async def get_by_number(self, article_id: UUID, number: int) -> ArticleVersion | None:
        """Get a version by its per-article number."""
        result = await self.db.execute(
            select(ArticleVersion).where(
                ArticleVersion.article_id == article_id,
                ArticleVersion.version == number,
            )
        )
        return result.scalar_one_or_none()

    async def diff(
        self,
        article_id: UUID,
        version_id: UUID,
        compare_with_id: UUID | None = None,
    ) -> VersionDiff:
        """
        Compare a version with another one of the same article.

        Without `compare_with_id` the baseline is the preceding version;
        version 1 is compared against an empty baseline (everything added,
        old title None).

        Raises:
            NotFoundError: If either version is missing
            VersionArticleMismatchError: If either belongs to another article
        """
        version = await self.get(article_id, version_id)

        if compare_with_id is not None:
            baseline: ArticleVersion | None = await self.get(article_id, compare_with_id)
        else:
            baseline = await self.get_by_number(article_id, version.version - 1)

        old_title = baseline.title if baseline is not None else None
        old_content = baseline.content if baseline is not None else ""

        return VersionDiff(
            version=version,
            compare_version=baseline,
            title_changed=old_title != version.title,
            old_title=old_title,
            new_title=version.title,
            content=diff_lines(old_content, version.content),
        )
