"""Environment-driven configuration for the feed run."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from errors import ConfigurationError

STORYGRAPH_BASE_URL = "https://app.thestorygraph.com"
_DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0

# Environment variable -> FeedConfig field, in the order they are reported.
REQUIRED_VARIABLES: dict[str, str] = {
    "STORYGRAPH_USER": "user",
    "OUTPUT_FILE": "output_file",
    "SESSION_COOKIE": "session_cookie",
    "FEED_TITLE": "feed_title",
    "FEED_DESCRIPTION": "feed_description",
    "FEED_URL": "feed_url",
    "FEED_SITE_URL": "feed_site_url",
}


@dataclass(frozen=True, slots=True)
class FeedConfig:
    """Immutable run configuration passed explicitly to every component."""

    user: str
    output_file: str
    session_cookie: str
    feed_title: str
    feed_description: str
    feed_url: str
    feed_site_url: str
    request_timeout: float = _DEFAULT_REQUEST_TIMEOUT_SECONDS

    @property
    def listing_url(self) -> str:
        """The user's books-read page, used as every item's link."""
        return f"{STORYGRAPH_BASE_URL}/books-read/{self.user}"


def load_config(environ: Mapping[str, str] | None = None) -> FeedConfig:
    """Build a FeedConfig from the environment.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Raises:
        ConfigurationError: if any required variable is missing or blank, or
            REQUEST_TIMEOUT_SECONDS is not a positive number.
    """
    if environ is None:
        environ = os.environ

    values: dict[str, str] = {}
    missing: list[str] = []
    for name, field_name in REQUIRED_VARIABLES.items():
        value = (environ.get(name) or "").strip()
        if not value:
            missing.append(name)
        values[field_name] = value

    if missing:
        raise ConfigurationError(
            "Missing required environment variables: " + ", ".join(missing)
        )

    raw_timeout = environ.get("REQUEST_TIMEOUT_SECONDS", "").strip()
    timeout = _DEFAULT_REQUEST_TIMEOUT_SECONDS
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ConfigurationError(
                f"REQUEST_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}"
            ) from exc
        if timeout <= 0:
            raise ConfigurationError("REQUEST_TIMEOUT_SECONDS must be greater than zero")

    return FeedConfig(request_timeout=timeout, **values)
