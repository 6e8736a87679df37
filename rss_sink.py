"""RSS 2.0 feed building and file output for finished books."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import UTC, datetime
from email.utils import format_datetime
from pathlib import Path

from aggregator import normalize_finished_date
from config import FeedConfig
from models import BookRecord, FeedDocument, FeedItem

ATOM_NS = "http://www.w3.org/2005/Atom"
GENERATOR = "storygraph-rss"
ENCLOSURE_TYPE = "image/jpeg"

ET.register_namespace("atom", ATOM_NS)

LOGGER = logging.getLogger(__name__)


def book_guid(book: BookRecord) -> str:
    """Stable item identifier from title, author and raw finished date.

    The three fields are JSON-encoded before hashing so that separator
    characters inside titles cannot make two different books collide.
    """
    payload = json.dumps(
        [book.title, book.author, book.finished_date_raw],
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


def build_item(book: BookRecord, link: str) -> FeedItem:
    return FeedItem(
        title=f"Finished {book.title} by {book.author}",
        description=f"I read {book.title} by {book.author}.",
        link=link,
        published_at=normalize_finished_date(book.finished_date_raw),
        guid=book_guid(book),
        enclosure_url=book.cover_image_url,
        enclosure_type=ENCLOSURE_TYPE,
        enclosure_title=f"{book.title} cover",
    )


def build_feed(
    config: FeedConfig,
    books: Iterable[BookRecord],
    generated_at: datetime | None = None,
) -> FeedDocument:
    """Build the feed document; items keep the order of ``books``."""
    if generated_at is None:
        generated_at = datetime.now(UTC)

    link = config.listing_url
    items = tuple(build_item(book, link) for book in books)
    return FeedDocument(
        title=config.feed_title,
        description=config.feed_description,
        feed_url=config.feed_url,
        site_url=config.feed_site_url,
        generated_at=generated_at,
        items=items,
    )


def render_rss(document: FeedDocument) -> bytes:
    """Serialize the document as indented UTF-8 RSS 2.0."""
    root = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(root, "channel")
    build_date = _rfc822(document.generated_at)

    ET.SubElement(channel, "title").text = document.title
    ET.SubElement(channel, "description").text = document.description
    ET.SubElement(channel, "link").text = document.site_url
    ET.SubElement(channel, "generator").text = GENERATOR
    ET.SubElement(channel, "lastBuildDate").text = build_date
    ET.SubElement(
        channel,
        f"{{{ATOM_NS}}}link",
        {"href": document.feed_url, "rel": "self", "type": "application/rss+xml"},
    )
    ET.SubElement(channel, "pubDate").text = build_date
    ET.SubElement(channel, "language").text = document.language

    for item in document.items:
        node = ET.SubElement(channel, "item")
        ET.SubElement(node, "title").text = item.title
        ET.SubElement(node, "description").text = item.description
        ET.SubElement(node, "link").text = item.link
        ET.SubElement(node, "guid", {"isPermaLink": "false"}).text = item.guid
        ET.SubElement(node, "pubDate").text = _rfc822(item.published_at)
        ET.SubElement(
            node,
            "enclosure",
            {
                "url": item.enclosure_url,
                "length": "0",
                "type": item.enclosure_type,
                "title": item.enclosure_title,
            },
        )

    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"


def write_feed(document: FeedDocument, output_path: str | os.PathLike[str]) -> Path:
    """Render and replace ``output_path`` in one step.

    The XML is fully rendered before the target is touched; it is written to a
    sibling temp file and moved over the target, so a failed run leaves any
    previous feed in place.
    """
    path = Path(output_path)
    payload = render_rss(document)

    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        tmp_path.write_bytes(payload)
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise

    LOGGER.info("RSS feed generated and saved to %s (%s items)", path, len(document.items))
    return path


def _rfc822(value: datetime) -> str:
    return format_datetime(value.astimezone(UTC), usegmt=True)
