"""
Wiki-link reference extraction.

Articles reference each other with bracketed markers in their content:

    [[Target title]]
    [[Target title|Displayed alias]]

`extract_wikilinks` returns the references in first-seen order, one per
distinct title. It never fails: anything that is not a complete marker is
plain text. Nested brackets are not supported; the first `]` or `|`
ends the title.
"""

import re
from dataclasses import dataclass

from wikigraph.services.slugs import generate_slug

# [[title]] or [[title|alias]]; title excludes ] and |, alias excludes ]
WIKILINK_RE = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")


@dataclass(frozen=True)
class WikiLink:
    """A parsed in-text reference to another article."""

    title: str
    alias: str | None = None

    @property
    def display_text(self) -> str:
        """Text shown to readers: the alias when present."""
        return self.alias or self.title

    @property
    def slug(self) -> str:
        return generate_slug(self.title)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"title": self.title, "alias": self.alias}


def iter_wikilink_matches(content: str | None):
    """Yield (match, WikiLink) for every marker in `content`, duplicates included."""
    for match in WIKILINK_RE.finditer(content or ""):
        title = match.group(1).strip()
        alias = match.group(2).strip() if match.group(2) is not None else None
        yield match, WikiLink(title=title, alias=alias or None)


def extract_wikilinks(content: str | None) -> list[WikiLink]:
    """
    Extract the wiki-link references of a text.

    De-duplicates by exact (case-sensitive) title, keeping the first
    occurrence together with its alias. Markers whose title is blank
    after trimming are skipped.

    Args:
        content: Article body (None is treated as empty)

    Returns:
        Ordered list of distinct references

    Example:
        extract_wikilinks("See [[Foo]] and [[Foo|Bar]] and [[Baz]]")
        -> [WikiLink("Foo"), WikiLink("Baz")]
    """
    links: list[WikiLink] = []
    seen: set[str] = set()

    for _, link in iter_wikilink_matches(content):
        # [[   ]] has nothing to resolve
        if not link.title or link.title in seen:
            continue
        seen.add(link.title)
        links.append(link)

    return links


def wikilinks_to_markdown(content: str | None, base_path: str = "/articles") -> str:
    """
    Rewrite every wiki-link marker as a plain markdown link.

    [[Title|Alias]] -> [Alias](/articles/title)
    [[Title]]       -> [Title](/articles/title)
    """
    base_path = base_path.rstrip("/")

    def repl(match: re.Match) -> str:
        title = match.group(1).strip()
        alias = (match.group(2) or "").strip()
        return f"[{alias or title}]({base_path}/{generate_slug(title)})"

    return WIKILINK_RE.sub(repl, content or "")
