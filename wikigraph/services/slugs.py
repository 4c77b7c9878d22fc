"""
Slug generation and allocation.

This module turns display titles into URL-safe identifiers:
- Lower-casing and Cyrillic -> Latin transliteration
- Collapsing everything outside [a-z0-9] into single hyphens
- Truncation to SLUG_MAX_LENGTH characters

`generate_slug` is pure and total. `allocate_slug` is the identifier
allocation step that makes a slug unique among stored articles.

Only Cyrillic is transliterated; letters of other non-Latin scripts are left
as they are and therefore end up inside the hyphen runs.
"""

import re
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.core.logging import get_logger
from wikigraph.db.models import Article, make_title_key

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

SLUG_MAX_LENGTH = 100

# Slug used when a title has no transliterable characters at all
EMPTY_SLUG_FALLBACK = "untitled"

CYRILLIC_TO_LATIN: dict[str, str] = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "yo",
    "ж": "zh", "з": "z", "и": "i", "й": "y", "к": "k", "л": "l", "м": "m",
    "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "у": "u",
    "ф": "f", "х": "h", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "sch",
    "ъ": "", "ы": "y", "ь": "", "э": "e", "ю": "yu", "я": "ya",
}

NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


# =============================================================================
# Pure functions
# =============================================================================


def transliterate(text: str) -> str:
    """Replace each Cyrillic letter with its Latin spelling; keep everything else."""
    return "".join(CYRILLIC_TO_LATIN.get(char, char) for char in text)


def generate_slug(title: str | None) -> str:
    """
    Convert a display title into a URL-safe slug.

    Args:
        title: Any string (None is treated as empty)

    Returns:
        Slug of at most SLUG_MAX_LENGTH characters, possibly empty

    Examples:
        generate_slug("Hello, World!")     -> "hello-world"
        generate_slug("Тестовая статья")   -> "testovaya-statya"
        generate_slug("Съёмка")            -> "syomka"
    """
    if not title:
        return ""

    slug = transliterate(title.lower())
    slug = NON_SLUG_CHARS.sub("-", slug).strip("-")
    # Truncation can expose a hyphen at the cut
    return slug[:SLUG_MAX_LENGTH].rstrip("-")


def title_key(title: str | None) -> str:
    """Case-insensitive comparison key used for title matching."""
    return make_title_key(title or "")


def with_suffix(base: str, counter: int) -> str:
    """Append `-counter` to a slug, trimming the base so the result still fits."""
    suffix = f"-{counter}"
    return base[: SLUG_MAX_LENGTH - len(suffix)].rstrip("-") + suffix


# =============================================================================
# Allocation
# =============================================================================


async def slug_exists(
    db: AsyncSession,
    slug: str,
    exclude_id: UUID | None = None,
) -> bool:
    """Check whether another article already holds `slug`."""
    query = select(Article.id).where(Article.slug == slug)
    if exclude_id is not None:
        query = query.where(Article.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def allocate_slug(
    db: AsyncSession,
    title: str,
    exclude_id: UUID | None = None,
) -> str:
    """
    Allocate a slug for `title` that no other article uses.

    Tries the plain slug first, then `slug-1`, `slug-2`, ... The unique
    index on `articles.slug` still guards against a concurrent allocation
    of the same value (surfacing as ConflictError at commit).

    Args:
        db: Database session
        title: Article title
        exclude_id: Article allowed to keep its own slug (renames)

    Returns:
        Unique slug
    """
    base = generate_slug(title) or EMPTY_SLUG_FALLBACK
    candidate = base
    counter = 1

    while await slug_exists(db, candidate, exclude_id=exclude_id):
        candidate = with_suffix(base, counter)
        counter += 1

    if candidate != base:
        logger.debug("Slug taken, using suffix", base=base, slug=candidate)

    return candidate
