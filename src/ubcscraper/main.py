#!/usr/bin/env python3
"""
Main entry point for the UBC course schedule scraper.

Usage:
    # Crawl the whole schedule into data/output.json
    python -m ubcscraper crawl

    # Crawl one subject (row index on the listing) into data/output_test.json
    python -m ubcscraper crawl --subject 145

    # Load a snapshot into the database
    python -m ubcscraper load --snapshot data/output.json
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .collectors.crawler import run_crawl
from .collectors.snapshot import failures_path_for
from .core.config import Settings, get_settings
from .core.exceptions import CatalogError, PersistenceFailure, SubjectIndexError
from .database.base import create_db_engine
from .pipelines.load_catalog import load_catalog

logger = logging.getLogger("ubcscraper")


def _banner(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def cmd_crawl(args: argparse.Namespace, settings: Settings) -> int:
    if args.headful:
        settings = settings.model_copy(update={"headless": False})

    _banner("Crawling UBC Course Schedule...")
    start_time = time.time()
    try:
        result = asyncio.run(
            run_crawl(
                settings,
                subject_index=args.subject,
                output_path=args.output,
                max_concurrent=args.concurrency,
                fail_fast=args.fail_fast,
            )
        )
    except SubjectIndexError as e:
        logger.error(str(e))
        return 2
    except CatalogError as e:
        logger.error(f"Crawl aborted, no snapshot written: {e}")
        return 1

    elapsed = time.time() - start_time
    snapshot = args.output or (
        settings.test_snapshot_path if args.subject is not None else settings.snapshot_path
    )

    _banner("Crawl Complete!")
    print(f"Time: {elapsed:.1f} seconds")
    print(f"Subjects: {result.subject_count}")
    print(f"Courses: {len(result.courses)}")
    print(f"Sections: {sum(len(c.sections) for c in result.courses)}")
    print(f"Snapshot: {snapshot}")
    if result.failures:
        report = failures_path_for(snapshot)
        print(f"Failures: {len(result.failures)} pages skipped, snapshot is partial")
        for failure in result.failures[:5]:
            print(f"  - {failure.url}: {failure.error_type}")
        print(f"Report: {report}")
        logger.warning(
            f"{len(result.failures)} pages were skipped; rerun with --fail-fast to abort on errors"
        )

    if args.load:
        return _load(Path(snapshot), settings.database_url)
    return 0


def cmd_load(args: argparse.Namespace, settings: Settings) -> int:
    snapshot = args.snapshot or settings.snapshot_path
    return _load(Path(snapshot), args.database_url or settings.database_url)


def _load(snapshot: Path, database_url: Optional[str]) -> int:
    _banner(f"Loading {snapshot}...")
    try:
        engine = create_db_engine(database_url) if database_url else None
        results = load_catalog(snapshot, engine=engine)
    except FileNotFoundError:
        logger.error(f"Snapshot not found: {snapshot}")
        return 1
    except ValidationError as e:
        logger.error(f"Snapshot {snapshot} is not valid: {e}")
        return 1
    except PersistenceFailure as e:
        logger.error(f"Load incomplete: {e}")
        return 1

    _banner("Load Complete!")
    print(f"Time: {results['elapsed_seconds']:.1f} seconds")
    print(f"Courses: {results['courses']}")
    print(f"Co-requisites: {results['coreqs']}")
    print(f"Pre-requisites: {results['prereqs']}")
    print(f"Course sections: {results['course_sections']}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ubcscraper",
        description="Scrape the UBC Course Schedule and load it into the database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full crawl, then load the snapshot
  ubcscraper crawl --load

  # Single subject, strictly sequential, stop at the first error
  ubcscraper crawl --subject 67 --concurrency 1 --fail-fast

  # Load an existing snapshot into another database
  ubcscraper load --snapshot data/output.json --database-url sqlite:///catalog.db
""",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    crawl = sub.add_parser("crawl", help="Crawl the schedule and write a snapshot")
    crawl.add_argument(
        "--subject",
        type=int,
        help="Only crawl the subject at this row of the listing (writes the test snapshot)",
    )
    crawl.add_argument("--output", type=Path, help="Snapshot path (overrides settings)")
    crawl.add_argument(
        "--concurrency", type=int, help="Max course pages scraped at once"
    )
    crawl.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort the whole crawl on the first failed page",
    )
    crawl.add_argument("--headful", action="store_true", help="Show the browser window")
    crawl.add_argument(
        "--load", action="store_true", help="Load the snapshot into the database afterwards"
    )

    load = sub.add_parser("load", help="Load a snapshot into the database")
    load.add_argument("--snapshot", type=Path, help="Snapshot path (overrides settings)")
    load.add_argument("--database-url", help="SQLAlchemy URL (overrides settings)")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "crawl":
            code = cmd_crawl(args, settings)
        else:
            code = cmd_load(args, settings)
    except KeyboardInterrupt:
        print("\nExiting...")
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
