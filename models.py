"""Shared typed models for the feed run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class BookRecord:
    """One finished book as listed on a books-read page."""

    title: str
    author: str
    cover_image_url: str
    finished_date_raw: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.title, self.author)


@dataclass(frozen=True, slots=True)
class FeedItem:
    title: str
    description: str
    link: str
    published_at: datetime
    guid: str
    enclosure_url: str
    enclosure_type: str
    enclosure_title: str


@dataclass(frozen=True, slots=True)
class FeedDocument:
    """Channel metadata plus the ordered item list."""

    title: str
    description: str
    feed_url: str
    site_url: str
    generated_at: datetime
    language: str = "en"
    items: tuple[FeedItem, ...] = field(default_factory=tuple)
