"""
Controlled vocabulary enums for articles and their history.

- ArticleStatus: publication state of an article (and of each snapshot)
- ChangeType: why a version was appended to the revision log
"""

from enum import Enum


class ArticleStatus(str, Enum):
    """
    Publication state of an article.

    Stored on the live article and copied into every version snapshot, so
    a revert restores the status together with title and content.
    """

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"

    @classmethod
    def from_string(cls, value: str | None) -> "ArticleStatus | None":
        """
        Convert a loosely formatted string to ArticleStatus.

        Case-insensitive, surrounding whitespace ignored. Returns None when
        the value is empty or unknown.

        Examples:
            ArticleStatus.from_string("published") -> ArticleStatus.PUBLISHED
            ArticleStatus.from_string(" Draft ")   -> ArticleStatus.DRAFT
            ArticleStatus.from_string("archived")  -> None
        """
        if not value:
            return None
        normalized = value.strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        return None


class ChangeType(str, Enum):
    """
    Reason a version was appended to an article's revision log.

    Version lifecycle::

        CREATE (v1) -> UPDATE (v2..) -> REVERT (copy of an earlier vN) -> ...

    The log is append-only: a REVERT never removes history, it appends a
    snapshot copied from the target version.
    """

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    REVERT = "REVERT"
