"""
Markdown import pipeline.

Turns a markdown file (optionally with a YAML front matter block) into an
article. The article is created through `ArticleService.create`, so an
imported article gets its first version, its outgoing links and the orphan
back-fill exactly like one written through the API.

Front matter keys used:
- title: article title (defaults to the filename without `.md`)
- status: "published" publishes the article, anything else is a draft
"""

import re
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import yaml
from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.core.errors import ValidationError
from wikigraph.core.logging import get_logger
from wikigraph.db.enums import ArticleStatus
from wikigraph.db.models import Article
from wikigraph.services.articles import ArticleService
from wikigraph.services.locks import ArticleLockRegistry
from wikigraph.services.wikilinks import wikilinks_to_markdown

logger = get_logger(__name__)

# Front matter must open on the first line and close on a line of its own
FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

MARKDOWN_SUFFIX = ".md"


@dataclass
class ParsedMarkdown:
    """A markdown document split into front matter and body."""

    metadata: dict[str, Any] = field(default_factory=dict)
    body: str = ""


def split_front_matter(text: str) -> ParsedMarkdown:
    """
    Split a leading `---` fenced YAML block from the markdown body.

    Text without a front matter block is returned unchanged as the body.

    Raises:
        ValidationError: If the block is not valid YAML or not a mapping
    """
    text = text.lstrip("\ufeff")
    match = FRONT_MATTER_RE.match(text)
    if match is None:
        return ParsedMarkdown(body=text)

    try:
        metadata = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid front matter: {e}") from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise ValidationError("Front matter must be a mapping")

    return ParsedMarkdown(metadata=metadata, body=text[match.end():])


def title_from_filename(filename: str) -> str:
    """'notes/My page.md' -> 'My page'"""
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    if name.lower().endswith(MARKDOWN_SUFFIX):
        name = name[: -len(MARKDOWN_SUFFIX)]
    return name.strip()


class MarkdownImporter:
    """
    Usage:
        importer = MarkdownImporter(db, locks)
        article = await importer.import_markdown("Python.md", text, user_id)
    """

    def __init__(self, db: AsyncSession, locks: ArticleLockRegistry | None = None):
        self.articles = ArticleService(db, locks)

    async def import_markdown(
        self,
        filename: str,
        text: str,
        author_id: UUID,
        convert_wikilinks: bool = False,
    ) -> Article:
        """
        Create an article from a markdown file.

        Args:
            filename: Original file name, used when front matter has no title
            text: File contents
            author_id: Acting user
            convert_wikilinks: Rewrite [[...]] markers as plain markdown links
                (the article then has no wiki-link edges)

        Returns:
            The created article

        Raises:
            ValidationError: If no title can be determined or front matter is invalid
        """
        parsed = split_front_matter(text)

        title = parsed.metadata.get("title")
        title = str(title).strip() if title is not None else ""
        if not title:
            title = title_from_filename(filename)
        if not title:
            raise ValidationError(f"Cannot determine a title for {filename!r}")

        raw_status = parsed.metadata.get("status")
        status = (
            ArticleStatus.from_string(raw_status) if isinstance(raw_status, str) else None
        ) or ArticleStatus.DRAFT

        content = parsed.body
        if convert_wikilinks:
            content = wikilinks_to_markdown(content)

        article = await self.articles.create(
            title=title,
            content=content,
            author_id=author_id,
            status=status,
            change_summary=f"Imported from {filename}",
        )

        logger.info(
            "Markdown imported",
            filename=filename,
            article_id=str(article.id),
            status=status.value,
            converted_wikilinks=convert_wikilinks,
        )
        return article
