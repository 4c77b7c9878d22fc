"""
Shared API dependencies.

- The per-article lock registry owned by the application
- The acting user taken from the `X-User-Id` header
- Conflict retry for write endpoints (the engine itself never retries)
"""

from collections.abc import Awaitable, Callable
from typing import TypeVar
from uuid import UUID

from fastapi import Header, Request
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from wikigraph.core.config import settings
from wikigraph.core.errors import ConflictError
from wikigraph.core.logging import bind_context, get_logger
from wikigraph.services.locks import ArticleLockRegistry

logger = get_logger(__name__)

T = TypeVar("T")


def get_article_locks(request: Request) -> ArticleLockRegistry:
    """Per-article lock registry created in the application lifespan."""
    return request.app.state.article_locks


async def get_user_id(
    x_user_id: UUID = Header(description="Acting user (authentication is handled upstream)"),
) -> UUID:
    """Acting user of a write request."""
    bind_context(user_id=str(x_user_id))
    return x_user_id


def _log_conflict_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Write conflict, retrying",
        attempt=retry_state.attempt_number,
        error=str(exc),
    )


async def with_conflict_retry(operation: Callable[[], Awaitable[T]]) -> T:
    """
    Run a write operation, retrying it when the store reports a conflict.

    Each attempt is a complete transaction (the failed one was rolled back),
    so retrying is safe. After `conflict_retry_attempts` attempts the last
    ConflictError propagates and becomes a 409.
    """
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(ConflictError),
        stop=stop_after_attempt(settings.conflict_retry_attempts),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        before_sleep=_log_conflict_retry,
        reraise=True,
    ):
        with attempt:
            return await operation()
    raise AssertionError("unreachable")
