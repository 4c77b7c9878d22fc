#!/usr/bin/env python3
"""
Rebuild the wiki-link graph from the articles' current content.

Each article's outgoing links are recomputed in its own transaction, then
orphan links are back-filled for every article title. Use this after a bulk
data load that bypassed the services, or to heal orphan links that lost a
resolution race.

Usage:
    # Show graph statistics only
    python scripts/relink_articles.py --stats

    # Report articles whose stored links differ from their content
    python scripts/relink_articles.py --dry-run

    # Rebuild everything
    python scripts/relink_articles.py

    # Rebuild the first 100 articles (oldest first)
    python scripts/relink_articles.py --limit 100
"""

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import select  # noqa: E402

from wikigraph.core.errors import ContentGraphError  # noqa: E402
from wikigraph.core.logging import get_logger, setup_logging  # noqa: E402
from wikigraph.db import Article, get_db_context, transaction  # noqa: E402
from wikigraph.services import LinkGraphService, extract_wikilinks  # noqa: E402

logger = get_logger(__name__)


async def show_stats() -> None:
    """Print link graph counters."""
    async with get_db_context() as db:
        stats = await LinkGraphService(db).graph_stats()

    print("\nLink Graph Statistics:")
    print(f"  Articles:        {stats.article_count}")
    print(f"  Links:           {stats.link_count}")
    print(f"  Resolved links:  {stats.resolved_link_count}")
    print(f"  Broken links:    {stats.orphan_link_count}")


async def load_articles(limit: int | None) -> list[Article]:
    async with get_db_context() as db:
        query = select(Article).order_by(Article.created_at, Article.id)
        if limit:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())


async def report_drift(limit: int | None) -> int:
    """Print articles whose stored link titles differ from their content."""
    articles = await load_articles(limit)
    drifted = 0

    async with get_db_context() as db:
        links = LinkGraphService(db)
        for article in articles:
            expected = {ref.title for ref in extract_wikilinks(article.content)}
            stored = {link.target_title for link in await links.get_outgoing(article.id)}
            if expected != stored:
                drifted += 1
                print(f"  {article.slug}: missing={sorted(expected - stored)} extra={sorted(stored - expected)}")

    print(f"\n{drifted} of {len(articles)} articles need relinking")
    return drifted


async def relink(limit: int | None) -> None:
    """Recompute outgoing links of every article, then back-fill orphans."""
    start_time = datetime.now()
    articles = await load_articles(limit)

    print(f"\n{'='*60}")
    print("Rebuilding wiki-link graph")
    print(f"{'='*60}")
    print(f"Articles: {len(articles)}")

    failed = 0
    async with get_db_context() as db:
        links = LinkGraphService(db)

        for i, article in enumerate(articles, start=1):
            try:
                async with transaction(db):
                    await links.sync_links(article.id, article.content)
            except ContentGraphError as e:
                failed += 1
                logger.error("Relink failed", article_id=str(article.id), error=str(e))
            print(f"\rSyncing links: {i}/{len(articles)}", end="", flush=True)
        print()

        resolved = 0
        for article in articles:
            resolved += await links.on_article_created_or_renamed(article.id, article.title)

    elapsed = (datetime.now() - start_time).total_seconds()
    print(f"Orphan links resolved: {resolved}")
    print(f"Failed articles:       {failed}")
    print(f"Elapsed:               {elapsed:.1f}s")

    await show_stats()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Rebuild the wiki-link graph from article content",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--limit", "-n",
        type=int,
        default=None,
        help="Maximum number of articles to process (oldest first)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report drifted articles without writing anything",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show graph statistics only",
    )

    args = parser.parse_args()
    setup_logging()

    if args.stats:
        asyncio.run(show_stats())
        return

    if args.dry_run:
        asyncio.run(report_drift(args.limit))
        return

    asyncio.run(relink(args.limit))


if __name__ == "__main__":
    main()
