"""Exception types for the books-read feed run.

Every error is fatal to the run; ``main`` maps them all to exit status 1.
"""

from __future__ import annotations


class FeedPipelineError(Exception):
    """Base class for failures that abort a feed run."""


class ConfigurationError(FeedPipelineError):
    """Required configuration is missing or invalid."""


class CountUnavailableError(FeedPipelineError):
    """The total number of read books could not be determined."""


class PageFetchError(FeedPipelineError):
    """A listing page could not be fetched."""

    def __init__(self, page: int | None, cause: Exception) -> None:
        self.page = page
        self.cause = cause
        target = "count page" if page is None else f"page {page}"
        super().__init__(f"Error fetching {target}: {cause}")


class ParseError(FeedPipelineError):
    """A listing page did not have the expected structure."""


class MalformedEntryError(ParseError):
    """A book entry whose cover alt text cannot be split into title and author."""


class RunCancelledError(FeedPipelineError):
    """The run was cancelled before it finished fetching."""
