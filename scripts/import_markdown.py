#!/usr/bin/env python3
"""
Import a directory of markdown files as articles.

Files are imported in name order through the same pipeline as the
`POST /api/v1/import/markdown` endpoint, so links between the imported files
resolve regardless of order: a link to a file imported later starts as an
orphan and is attached when its target is created.

Usage:
    python scripts/import_markdown.py ./vault --author 0190a3c2-...

    # Rewrite [[wiki-links]] as plain markdown links
    python scripts/import_markdown.py ./vault --author ... --convert-wikilinks
"""

import argparse
import asyncio
import sys
from pathlib import Path
from uuid import UUID

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wikigraph.core.errors import ContentGraphError  # noqa: E402
from wikigraph.core.logging import get_logger, setup_logging  # noqa: E402
from wikigraph.db import get_db_context  # noqa: E402
from wikigraph.services import ArticleLockRegistry, MarkdownImporter  # noqa: E402

logger = get_logger(__name__)


async def import_directory(directory: Path, author_id: UUID, convert_wikilinks: bool) -> None:
    files = sorted(directory.rglob("*.md"))
    if not files:
        print(f"No markdown files found in {directory}")
        return

    print(f"Importing {len(files)} files from {directory}")
    imported = failed = 0

    async with get_db_context() as db:
        importer = MarkdownImporter(db, ArticleLockRegistry())
        for path in files:
            try:
                article = await importer.import_markdown(
                    path.name,
                    path.read_text(encoding="utf-8"),
                    author_id,
                    convert_wikilinks=convert_wikilinks,
                )
            except ContentGraphError as e:
                failed += 1
                logger.error("Import failed", path=str(path), error=str(e))
                continue
            imported += 1
            print(f"  {path.name} -> {article.slug}")

    print(f"\nImported: {imported}  Failed: {failed}")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Import markdown files as articles")
    parser.add_argument("directory", type=Path, help="Directory to scan for *.md files")
    parser.add_argument("--author", "-a", type=UUID, required=True, help="Author user id")
    parser.add_argument(
        "--convert-wikilinks",
        action="store_true",
        help="Rewrite [[wiki-links]] as markdown links",
    )

    args = parser.parse_args()
    setup_logging()

    if not args.directory.is_dir():
        parser.error(f"{args.directory} is not a directory")

    asyncio.run(import_directory(args.directory, args.author, args.convert_wikilinks))


if __name__ == "__main__":
    main()
