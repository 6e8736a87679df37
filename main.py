"""Entrypoint: scrape StoryGraph books-read pages and write an RSS feed."""

from __future__ import annotations

import logging
import signal
import sys
import threading

from dotenv import load_dotenv

from aggregator import dedupe_books, page_count
from config import FeedConfig, load_config
from errors import ConfigurationError, CountUnavailableError, FeedPipelineError
from models import BookRecord, FeedDocument
from rss_sink import build_feed, write_feed
from storygraph_client import StoryGraphClient
from storygraph_parser import extract_books, extract_total_books


def collect_books(client: StoryGraphClient) -> list[BookRecord]:
    """Fetch the count page, then every listing page in ascending order."""
    total_books = extract_total_books(client.fetch_listing())
    if not total_books:
        raise CountUnavailableError("Could not determine total number of books")

    total_pages = page_count(total_books)
    logging.info("Found %s books across %s pages", total_books, total_pages)

    books: list[BookRecord] = []
    for page in range(1, total_pages + 1):
        logging.info("Fetching page %s/%s", page, total_pages)
        page_books = extract_books(client.fetch_listing(page))
        books.extend(page_books)
        logging.info("Page %s: kept=%s", page, len(page_books))

    return books


def run(
    config: FeedConfig,
    client: StoryGraphClient | None = None,
    cancel_event: threading.Event | None = None,
) -> FeedDocument:
    """Run one full scrape and overwrite the configured feed file.

    The file is only written after every page has been fetched and parsed.
    """
    owns_client = client is None
    if client is None:
        client = StoryGraphClient(config, cancel_event=cancel_event)

    try:
        books = collect_books(client)
    finally:
        if owns_client:
            client.close()

    unique = dedupe_books(books)
    document = build_feed(config, unique)
    write_feed(document, config.output_file)
    return document


def _install_cancel_handler(cancel_event: threading.Event) -> None:
    """Let SIGTERM stop the run between page fetches."""

    def _handle(signum: int, _frame: object) -> None:
        logging.warning("Received signal %s, cancelling after the current request", signum)
        cancel_event.set()

    signal.signal(signal.SIGTERM, _handle)


def main() -> None:
    """Initialize config and execute one feed run."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    try:
        config = load_config()
    except ConfigurationError as exc:
        logging.error("%s. Please check your .env file.", exc)
        sys.exit(1)

    cancel_event = threading.Event()
    _install_cancel_handler(cancel_event)

    try:
        run(config, cancel_event=cancel_event)
    except (FeedPipelineError, OSError) as exc:
        logging.error("Failed to generate feed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
