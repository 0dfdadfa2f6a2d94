"""Scheduled job: scrape the active games of every channel."""
import asyncio
import logging
import uuid
from typing import Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from src.config import config
from src.errors import TransportError
from src.fetch.client import HtmlFetcher
from src.jobs.metrics import Metrics
from src.metadata.tmdb import ShowMetadataLookup, decorate_listing
from src.parse.models import GameListing
from src.scrapers.registry import AVAILABLE_CHANNELS, create_scraper
from src.store.export import JsonlExporter

logger = logging.getLogger(__name__)


class ScrapeRunner:
    """
    Runs list_active_games() for every channel concurrently.

    A channel failing with TransportError is retried with exponential
    backoff; once retries are exhausted it is reported and skipped, the
    other channels still complete.
    """

    def __init__(
        self,
        fetcher: HtmlFetcher,
        channels: Optional[list[str]] = None,
        metadata_lookup: Optional[ShowMetadataLookup] = None,
        exporter: Optional[JsonlExporter] = None,
        max_retries: Optional[int] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        self.fetcher = fetcher
        self.channels = channels or list(AVAILABLE_CHANNELS)
        self.metadata_lookup = metadata_lookup
        self.exporter = exporter
        self.max_retries = max_retries if max_retries is not None else config.MAX_RETRIES
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=30)
        self.run_id = uuid.uuid4().hex[:12]
        self.metrics = Metrics(self.channels)
        self.failures: dict[str, str] = {}

    def _before_sleep(self, channel: str):
        def log_retry(retry_state: RetryCallState) -> None:
            self.metrics.increment("retries")
            logger.warning(
                f"[RUNNER] {channel} attempt {retry_state.attempt_number} failed: "
                f"{retry_state.outcome.exception()}, retrying"
            )
        return log_retry

    async def _scrape_with_retry(self, channel: str) -> list[GameListing]:
        scraper = create_scraper(channel, self.fetcher)
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(self.max_retries, 0) + 1),
            wait=self.retry_wait,
            retry=retry_if_exception_type(TransportError),
            before_sleep=self._before_sleep(channel),
            reraise=True,
        ):
            with attempt:
                return await scraper.list_active_games()
        return []

    async def _decorate(self, listings: list[GameListing]) -> list[GameListing]:
        if self.metadata_lookup is None:
            return listings
        return list(await asyncio.gather(
            *(decorate_listing(listing, self.metadata_lookup) for listing in listings)
        ))

    async def scrape_channel(self, channel: str) -> list[GameListing]:
        try:
            listings = await self._scrape_with_retry(channel)
        except TransportError as e:
            logger.error(f"[RUNNER] {channel} failed after {self.max_retries} retries: {e}")
            self.metrics.record_failure(channel)
            self.failures[channel] = str(e)
            return []

        listings = await self._decorate(listings)
        self.metrics.record_channel(channel, len(listings))
        if self.exporter is not None and listings:
            await self.exporter.write_records(listings, channel, self.run_id)
        return listings

    async def run(self) -> dict[str, list[GameListing]]:
        """Scrape all channels; returns listings per channel (empty for failed ones)."""
        logger.info(f"[RUNNER] run {self.run_id} starting for {', '.join(self.channels)}")
        results = await asyncio.gather(*(self.scrape_channel(channel) for channel in self.channels))
        self._final_report()
        return dict(zip(self.channels, results))

    def _final_report(self) -> None:
        logger.info("=" * 60)
        logger.info("FINAL REPORT")
        logger.info(f"Run ID: {self.run_id}")
        self.metrics.report()
        for channel, reason in self.failures.items():
            logger.info(f"Failed channel {channel}: {reason}")
        logger.info("=" * 60)
