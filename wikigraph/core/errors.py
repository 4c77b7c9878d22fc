"""
Error kinds raised by the content graph engine.

The engine never retries: store errors are translated into one of these
kinds and surfaced to the caller, which owns the retry policy.

    ContentGraphError
    ├── NotFoundError               article / version / link absent
    ├── ValidationError             request is well-formed but not allowed
    │   └── VersionArticleMismatchError (also a NotFoundError)
    ├── ConflictError               concurrent write detected by the store
    └── StoreFailure                any other persistence error
"""

from uuid import UUID


class ContentGraphError(Exception):
    """Base exception for content graph errors."""

    pass


class NotFoundError(ContentGraphError):
    """Raised when an article, version or link does not exist."""

    def __init__(self, kind: str, identifier: UUID | str | int):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")


class ValidationError(ContentGraphError):
    """Raised when a request is rejected by an engine rule."""

    pass


class VersionArticleMismatchError(NotFoundError, ValidationError):
    """Raised when a version exists but belongs to a different article."""

    def __init__(self, version_id: UUID, article_id: UUID):
        self.article_id = article_id
        NotFoundError.__init__(self, "Version", version_id)
        self.args = (f"Version {version_id} does not belong to article {article_id}",)


class ConflictError(ContentGraphError):
    """Raised when the store detects a concurrent-write race."""

    pass


class StoreFailure(ContentGraphError):
    """Raised when the underlying store fails; the cause is chained."""

    pass
