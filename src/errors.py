"""Exceptions raised by the scrapers and the invoice pipeline."""
from typing import Optional


class ScraperError(RuntimeError):
    """Base class for every scraping / extraction failure."""


class TransportError(ScraperError):
    """Network failure, timeout or non-2xx response. Never retried in the core."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(ScraperError):
    """Malformed JSON / PDF / HTML. Always recovered by the caller."""


class NotFoundError(ScraperError):
    """No scraper implementation for the requested channel."""

    def __init__(self, channel: str, available: list[str]):
        super().__init__(f"No scraper available for channel '{channel}'")
        self.channel = channel
        self.available = available
