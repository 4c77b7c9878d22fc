"""
Per-article write serialization.

Two writes to the same article must not interleave their link-graph
delete/insert phases or their version appends. Within one process this
registry hands out one `asyncio.Lock` per article id; across processes the
article row lock taken by `lock_article_row` does the same job on
PostgreSQL. Writes to different articles never share a lock.

The registry is an explicit object owned by the application (stored on
`app.state`) and passed to the services; there is no module-level instance.
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.core.errors import NotFoundError
from wikigraph.db.models import Article


@dataclass
class _Entry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class ArticleLockRegistry:
    """
    Keyed asyncio locks, created on demand and dropped when unused.

    Usage:
        locks = ArticleLockRegistry()
        async with locks.hold(article_id):
            ...  # exclusive for this article only
    """

    def __init__(self) -> None:
        self._entries: dict[UUID, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def is_locked(self, article_id: UUID) -> bool:
        entry = self._entries.get(article_id)
        return entry is not None and entry.lock.locked()

    @asynccontextmanager
    async def hold(self, article_id: UUID) -> AsyncGenerator[None, None]:
        """Hold the lock for `article_id` for the duration of the block."""
        entry = self._entries.get(article_id)
        if entry is None:
            entry = self._entries[article_id] = _Entry()
        # Counted before waiting so a waiter keeps the entry alive
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._entries.pop(article_id, None)


@asynccontextmanager
async def maybe_hold(
    locks: ArticleLockRegistry | None,
    article_id: UUID,
) -> AsyncGenerator[None, None]:
    """Hold the article lock when a registry is configured, otherwise do nothing."""
    if locks is None:
        yield
        return
    async with locks.hold(article_id):
        yield


async def lock_article_row(db: AsyncSession, article_id: UUID) -> Article:
    """
    Load an article with a row-level write lock (SELECT ... FOR UPDATE).

    Must run inside the write transaction; the lock is released at commit or
    rollback. SQLite ignores FOR UPDATE and serializes writers itself.

    Raises:
        NotFoundError: If the article does not exist
    """
    result = await db.execute(
        select(Article)
        .where(Article.id == article_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    article = result.scalar_one_or_none()
    if article is None:
        raise NotFoundError("Article", article_id)
    return article
