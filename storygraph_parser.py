"""HTML extraction for StoryGraph books-read pages.

Selectors assumed on the listing markup:

  .search-results-count            text like "123 books"
  .book-pane-content               one per listed book
    .cover-image-column img        alt="<title> by <author>", src=<cover url>
    .action-menu a p               "Finished Mar 5, 2024" / "No read date"
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from errors import MalformedEntryError, ParseError
from models import BookRecord

COUNT_SELECTOR = ".search-results-count"
ENTRY_SELECTOR = ".book-pane-content"
COVER_SELECTOR = ".cover-image-column img"
DATE_SELECTOR = ".action-menu a p"

_COUNT_PATTERN = re.compile(r"(\d[\d,]*)\s+books?\b")
_TITLE_AUTHOR_SEPARATOR = " by "
_DATE_NOISE = ("Finished ", "Click to edit read date")
_NO_READ_DATE = "No read date"


def extract_total_books(html: str) -> int:
    """Return the total read-book count shown on the listing, or 0 if absent."""
    soup = BeautifulSoup(html, "html.parser")
    element = soup.select_one(COUNT_SELECTOR)
    if element is None:
        return 0

    match = _COUNT_PATTERN.search(element.get_text(" ", strip=True))
    if not match:
        return 0
    return int(match.group(1).replace(",", ""))


def extract_books(html: str) -> list[BookRecord]:
    """Parse one listing page into BookRecords, in document order.

    Entries with an empty title, author or finished date, or whose date reads
    "No read date", are dropped.
    """
    soup = BeautifulSoup(html, "html.parser")
    books: list[BookRecord] = []
    for entry in soup.select(ENTRY_SELECTOR):
        book = _parse_entry(entry)
        if not _is_listable(book):
            continue
        if not book.cover_image_url:
            raise ParseError(_missing_attr_message("src"))
        books.append(book)
    return books


def _parse_entry(entry: Tag) -> BookRecord:
    image = entry.select_one(COVER_SELECTOR)
    if image is None:
        raise ParseError(f"Book entry has no cover image ({COVER_SELECTOR!r})")

    alt = _attr_text(image, "alt")
    if not alt.strip():
        raise ParseError(_missing_attr_message("alt"))
    src = _attr_text(image, "src").strip()
    title, author = split_title_author(alt)

    return BookRecord(
        title=title,
        author=author,
        cover_image_url=src,
        finished_date_raw=_finished_date_text(entry),
    )


def split_title_author(alt: str) -> tuple[str, str]:
    """Split "<title> by <author>" into stripped title and author.

    The split is at the last " by ", so a title that itself contains " by "
    stays whole; the author is assumed not to.
    """
    title, separator, author = alt.rpartition(_TITLE_AUTHOR_SEPARATOR)
    if not separator:
        raise MalformedEntryError(f"Cover alt text has no {_TITLE_AUTHOR_SEPARATOR!r}: {alt!r}")
    return title.strip(), author.strip()


def _finished_date_text(entry: Tag) -> str:
    paragraph = entry.select_one(DATE_SELECTOR)
    if paragraph is None:
        return ""

    text = paragraph.get_text().strip()
    for noise in _DATE_NOISE:
        text = text.replace(noise, "", 1)
    return text.strip()


def _is_listable(book: BookRecord) -> bool:
    return bool(
        book.title
        and book.author
        and book.finished_date_raw
        and _NO_READ_DATE not in book.finished_date_raw
    )


def _attr_text(image: Tag, name: str) -> str:
    value = image.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value or ""


def _missing_attr_message(name: str) -> str:
    return f"Cover image ({COVER_SELECTOR!r}) is missing its {name!r} attribute"
