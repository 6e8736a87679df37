from __future__ import annotations

import pytest

from config import REQUIRED_VARIABLES, FeedConfig, load_config
from errors import ConfigurationError

_FULL_ENV = {
    "STORYGRAPH_USER": "reader",
    "OUTPUT_FILE": "/tmp/books.xml",
    "SESSION_COOKIE": "_storygraph_session=abc123",
    "FEED_TITLE": "Books I've Read",
    "FEED_DESCRIPTION": "Finished books from StoryGraph",
    "FEED_URL": "https://example.com/books.xml",
    "FEED_SITE_URL": "https://example.com/",
}


def test_load_config_reads_all_required_values() -> None:
    config = load_config(_FULL_ENV)

    assert config == FeedConfig(
        user="reader",
        output_file="/tmp/books.xml",
        session_cookie="_storygraph_session=abc123",
        feed_title="Books I've Read",
        feed_description="Finished books from StoryGraph",
        feed_url="https://example.com/books.xml",
        feed_site_url="https://example.com/",
        request_timeout=30.0,
    )
    assert config.listing_url == "https://app.thestorygraph.com/books-read/reader"


@pytest.mark.parametrize("name", sorted(REQUIRED_VARIABLES))
def test_load_config_missing_variable_raises(name: str) -> None:
    env = {k: v for k, v in _FULL_ENV.items() if k != name}

    with pytest.raises(ConfigurationError, match=name):
        load_config(env)


@pytest.mark.parametrize("name", sorted(REQUIRED_VARIABLES))
def test_load_config_blank_variable_raises(name: str) -> None:
    env = {**_FULL_ENV, name: "   "}

    with pytest.raises(ConfigurationError, match=name):
        load_config(env)


def test_load_config_reports_every_missing_variable() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_config({"STORYGRAPH_USER": "reader"})

    message = str(excinfo.value)
    for name in REQUIRED_VARIABLES:
        if name != "STORYGRAPH_USER":
            assert name in message
    assert "STORYGRAPH_USER" not in message


def test_load_config_request_timeout_override() -> None:
    config = load_config({**_FULL_ENV, "REQUEST_TIMEOUT_SECONDS": "7.5"})
    assert config.request_timeout == 7.5


@pytest.mark.parametrize("raw", ["soon", "0", "-3"])
def test_load_config_rejects_bad_timeout(raw: str) -> None:
    with pytest.raises(ConfigurationError, match="REQUEST_TIMEOUT_SECONDS"):
        load_config({**_FULL_ENV, "REQUEST_TIMEOUT_SECONDS": raw})


def test_load_config_defaults_to_os_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in _FULL_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("REQUEST_TIMEOUT_SECONDS", raising=False)

    assert load_config().user == "reader"
