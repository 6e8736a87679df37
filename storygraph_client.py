"""HTTP access to StoryGraph books-read listing pages."""

from __future__ import annotations

import logging
import threading

import requests

from config import FeedConfig
from errors import PageFetchError, RunCancelledError

LOGGER = logging.getLogger(__name__)


class StoryGraphClient:
    """Fetches raw listing HTML with the session cookie attached.

    One GET per call, no retries. Request failures surface as PageFetchError.
    """

    def __init__(
        self,
        config: FeedConfig,
        session: requests.Session | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._config = config
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"Cookie": config.session_cookie})
        self._cancel_event = cancel_event

    def __enter__(self) -> StoryGraphClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def listing_url(self, page: int | None = None) -> str:
        """Return the listing URL; page None is the unpaginated count page."""
        if page is None:
            return self._config.listing_url
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        return f"{self._config.listing_url}?page={page}"

    def fetch_listing(self, page: int | None = None) -> str:
        """GET one listing page and return its HTML text."""
        if self._cancel_event is not None and self._cancel_event.is_set():
            target = "count page" if page is None else f"page {page}"
            raise RunCancelledError(f"Run cancelled before fetching {target}")

        url = self.listing_url(page)
        try:
            response = self._session.get(url, timeout=self._config.request_timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise PageFetchError(page, exc) from exc

        LOGGER.debug("Fetched %s (%s bytes)", url, len(response.content))
        return response.text
