"""
Engine, declarative base and column mixins.

Every model inherits from `Base` and takes its key and timestamps from the
mixins below. Only portable column types are used (`Uuid`, timezone-aware
`DateTime`), so the models run unchanged on PostgreSQL and on the SQLite
database the test-suite uses.
"""

import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import DateTime, MetaData, Uuid
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from uuid6 import uuid7

from wikigraph.core.config import settings

# Constraint names must match the ones Alembic writes in the migrations
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def utcnow() -> datetime:
    """Timezone-aware now; Python-side default for every timestamp column."""
    return datetime.now(timezone.utc)


def build_engine(url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """
    Async engine for `url`, or for the configured database.

    SQLite keeps its dialect default pool; server databases get a small
    fixed pool with overflow.
    """
    url = url or settings.db_url
    options: dict[str, Any] = {
        "echo": settings.db_echo if echo is None else echo,
        "pool_pre_ping": True,
    }
    if make_url(url).get_backend_name() != "sqlite":
        options.update(pool_size=5, max_overflow=10)
    return create_async_engine(url, **options)


engine = build_engine()

# Objects stay readable after commit; services flush when they need ids
AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def _plural(name: str) -> str:
    if name.endswith("y"):
        return name[:-1] + "ies"
    if name.endswith("s"):
        return name + "es"
    return name + "s"


def _jsonable(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class Base(AsyncAttrs, DeclarativeBase):
    """
    Declarative base.

    Table names derive from the class name (ArticleVersion -> article_versions,
    AuditLog -> audit_logs).
    """

    metadata = metadata

    __name__: str

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return _plural(_CAMEL_BOUNDARY.sub("_", cls.__name__).lower())

    def to_dict(self) -> dict[str, Any]:
        """Column values as a JSON-friendly dict (used for audit snapshots)."""
        return {
            column.name: _jsonable(getattr(self, column.name))
            for column in self.__table__.columns
        }


class UUIDMixin:
    """Time-sortable UUIDv7 primary key."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid7,
        sort_order=-100,
    )


class CreatedAtMixin:
    """Creation timestamp for rows that are never edited in place."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        sort_order=100,
    )


class TimestampMixin(CreatedAtMixin):
    """
    created_at plus updated_at.

    Both are filled in Python, so they are readable right after a flush
    without a refresh.
    """

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        sort_order=101,
    )


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create every table from metadata (tests and local runs; production uses Alembic)."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None) -> None:
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    await engine.dispose()
