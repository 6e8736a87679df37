from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from config import FeedConfig
from errors import PageFetchError, RunCancelledError
from storygraph_client import StoryGraphClient

_CONFIG = FeedConfig(
    user="reader",
    output_file="books.xml",
    session_cookie="_storygraph_session=abc123",
    feed_title="Books",
    feed_description="Read books",
    feed_url="https://example.com/books.xml",
    feed_site_url="https://example.com/",
    request_timeout=12.0,
)

_LISTING = "https://app.thestorygraph.com/books-read/reader"


def _mock_session(text: str = "<html></html>") -> MagicMock:
    response = MagicMock()
    response.text = text
    response.content = text.encode("utf-8")
    session = MagicMock()
    session.headers = {}
    session.get.return_value = response
    return session


def test_listing_url_first_page_has_no_query() -> None:
    client = StoryGraphClient(_CONFIG, session=_mock_session())
    assert client.listing_url() == _LISTING
    assert client.listing_url(3) == f"{_LISTING}?page=3"


def test_listing_url_rejects_page_zero() -> None:
    client = StoryGraphClient(_CONFIG, session=_mock_session())
    with pytest.raises(ValueError):
        client.listing_url(0)


def test_session_sends_only_cookie_header() -> None:
    session = _mock_session()
    StoryGraphClient(_CONFIG, session=session)
    assert session.headers == {"Cookie": "_storygraph_session=abc123"}


def test_fetch_listing_returns_text_and_uses_timeout() -> None:
    session = _mock_session("<p>page two</p>")
    client = StoryGraphClient(_CONFIG, session=session)

    assert client.fetch_listing(2) == "<p>page two</p>"
    session.get.assert_called_once_with(f"{_LISTING}?page=2", timeout=12.0)


def test_fetch_listing_http_error_reports_page() -> None:
    session = _mock_session()
    session.get.return_value.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
    client = StoryGraphClient(_CONFIG, session=session)

    with pytest.raises(PageFetchError) as excinfo:
        client.fetch_listing(4)

    assert excinfo.value.page == 4
    assert "page 4" in str(excinfo.value)
    assert isinstance(excinfo.value.cause, requests.HTTPError)


def test_fetch_listing_network_error_on_count_page() -> None:
    session = _mock_session()
    session.get.side_effect = requests.ConnectionError("connection refused")
    client = StoryGraphClient(_CONFIG, session=session)

    with pytest.raises(PageFetchError, match="count page") as excinfo:
        client.fetch_listing()

    assert excinfo.value.page is None


def test_fetch_listing_cancelled_skips_request() -> None:
    session = _mock_session()
    cancel = threading.Event()
    cancel.set()
    client = StoryGraphClient(_CONFIG, session=session, cancel_event=cancel)

    with pytest.raises(RunCancelledError, match="page 2"):
        client.fetch_listing(2)

    session.get.assert_not_called()


def test_close_only_closes_owned_session() -> None:
    borrowed = _mock_session()
    with StoryGraphClient(_CONFIG, session=borrowed):
        pass
    borrowed.close.assert_not_called()

    with patch("storygraph_client.requests.Session") as session_cls:
        session_cls.return_value.headers = {}
        with StoryGraphClient(_CONFIG):
            pass
    session_cls.return_value.close.assert_called_once()
