"""
NoteMe — Static Site Build Command
===================================

Usage:
    noteme-build [--data PATH] [--out DIR] [--public DIR] [--language en|ru]
    python -m noteme.site ...

Source selection:
    - JSONBIN_BIN_ID and JSONBIN_API_KEY set, no --data → read from JSONBin
    - otherwise → read the local JSON file (--data, default DATA_FILE)

Exit status: 0 on success, 1 when the build failed (reason logged).
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from noteme.config import settings
from noteme.exceptions import NoteMeError
from noteme.logging_setup import setup_logging
from noteme.services.file_store import FileDocumentStore
from noteme.services.jsonbin_store import jsonbin_store_from_settings
from noteme.services.store_base import DocumentStore
from noteme.site.builder import SiteBuilder

logger = logging.getLogger("noteme.site")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="noteme-build",
        description="Render the NoteMe document into static HTML pages.",
    )
    parser.add_argument(
        "--data",
        default=None,
        help="Local JSON document to read instead of JSONBin (default: DATA_FILE when JSONBin is not configured)",
    )
    parser.add_argument("--out", default=settings.dist_dir, help="Output directory (default: %(default)s)")
    parser.add_argument("--public", default=settings.public_dir, help="Static files to copy (default: %(default)s)")
    parser.add_argument(
        "--language",
        choices=["en", "ru"],
        default=settings.site_language,
        help="Page language (default: %(default)s)",
    )
    return parser.parse_args(argv)


def select_store(data: Optional[str]) -> DocumentStore:
    if data is None and settings.jsonbin_configured:
        logger.info("Fetching data from JSONBin.io...")
        return jsonbin_store_from_settings()
    path = data or settings.data_file
    logger.info("Reading local %s...", path)
    return FileDocumentStore(path)


async def run(args: argparse.Namespace) -> int:
    store = select_store(args.data)
    # Only a remote store has transient failures worth waiting for
    attempts = settings.build_fetch_attempts if store.name == "jsonbin" else 1
    builder = SiteBuilder(
        store=store,
        dist_dir=args.out,
        public_dir=args.public,
        language=args.language,
        fetch_attempts=attempts,
        min_wait=settings.build_fetch_min_wait,
        max_wait=settings.build_fetch_max_wait,
    )
    try:
        await builder.build()
    except NoteMeError as e:
        logger.error("Build failed: %s | Context: %s", e.message, e.context)
        return 1
    except OSError as e:
        logger.error("Build failed: cannot write output: %s", str(e))
        return 1
    finally:
        await store.aclose()
    logger.info("Build complete! Output: %s", args.out)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
