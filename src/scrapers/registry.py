"""Channel code -> scraper implementation."""
from src.errors import NotFoundError
from src.fetch.client import HtmlFetcher
from src.scrapers.base import BaseChannelScraper
from src.scrapers.m6 import M6Scraper
from src.scrapers.tf1 import TF1Scraper

SCRAPERS: dict[str, type[BaseChannelScraper]] = {
    "tf1": TF1Scraper,
    "m6": M6Scraper,
}

AVAILABLE_CHANNELS = list(SCRAPERS)


def create_scraper(channel: str, fetcher: HtmlFetcher, **kwargs) -> BaseChannelScraper:
    """Build the scraper of a channel (case-insensitive). Unknown channel -> NotFoundError."""
    scraper_cls = SCRAPERS.get((channel or "").strip().lower())
    if scraper_cls is None:
        raise NotFoundError(channel, AVAILABLE_CHANNELS)
    return scraper_cls(fetcher, **kwargs)
