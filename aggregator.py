"""Page arithmetic, deduplication and date normalization for read books."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta, timezone

from dateutil import parser as dtparser

from errors import ParseError
from models import BookRecord

PAGE_SIZE = 10

# Fixed offset, not a zoneinfo zone: daylight-saving shifts are ignored.
FINISHED_TZ = timezone(timedelta(hours=-6))
FINISHED_HOUR = 12

LOGGER = logging.getLogger(__name__)


def page_count(total_books: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total_books / page_size)


def dedupe_books(books: Iterable[BookRecord]) -> list[BookRecord]:
    """Keep the first BookRecord per (title, author), in first-seen order."""
    unique: dict[tuple[str, str], BookRecord] = {}
    total = 0
    for book in books:
        total += 1
        if book.key in unique:
            LOGGER.info("Skipping duplicate book: %s by %s", book.title, book.author)
            continue
        unique[book.key] = book

    LOGGER.info(
        "Dedup: total=%s unique=%s duplicates=%s",
        total,
        len(unique),
        total - len(unique),
    )
    return list(unique.values())


def normalize_finished_date(raw: str) -> datetime:
    """Turn a finished-date string into noon UTC-6 on that day, expressed in UTC.

    "March 5, 2024" -> 2024-03-05 18:00:00+00:00
    """
    today = datetime.now(UTC)
    try:
        parsed = dtparser.parse(raw, default=datetime(today.year, 1, 1))
    except (ValueError, OverflowError) as exc:
        raise ParseError(f"Unparseable finished date: {raw!r}") from exc

    noon = datetime(parsed.year, parsed.month, parsed.day, FINISHED_HOUR, tzinfo=FINISHED_TZ)
    return noon.astimezone(UTC)
