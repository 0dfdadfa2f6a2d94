"""FastAPI application exposing rules, games and refundability checks."""
import logging
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.security import APIKeyHeader

from src.config import config
from src.errors import NotFoundError, TransportError
from src.fetch.client import HtmlFetcher
from src.parse.models import GameListing, RefundabilityReport, RuleDetails, RuleDocument
from src.scrapers.base import BaseChannelScraper
from src.scrapers.refundability import check_refundability
from src.scrapers.registry import AVAILABLE_CHANNELS, create_scraper

logger = logging.getLogger(__name__)

app = FastAPI(title="TV Game Refund Scraper API", version="0.1.0")

# API Key security (if configured)
API_KEY_HEADER = APIKeyHeader(name="X-API-KEY", auto_error=False)


def verify_api_key(api_key: str = Depends(API_KEY_HEADER)) -> bool:
    """Verify API key if configured."""
    expected_key = config.API_KEY
    if expected_key:
        if not api_key or api_key != expected_key:
            raise HTTPException(status_code=403, detail="Invalid API key")
    return True


async def get_fetcher() -> AsyncIterator[HtmlFetcher]:
    """One HTTP client per request."""
    async with HtmlFetcher() as fetcher:
        yield fetcher


def _scraper(channel: str, fetcher: HtmlFetcher) -> BaseChannelScraper:
    try:
        return create_scraper(channel, fetcher)
    except NotFoundError as e:
        raise HTTPException(
            status_code=404,
            detail={"error": str(e), "available_channels": e.available},
        ) from e


def _upstream_error(e: TransportError) -> HTTPException:
    logger.warning(f"[API] upstream failure: {e}")
    return HTTPException(
        status_code=502,
        detail={"error": str(e), "url": e.url, "upstream_status": e.status_code},
    )


@app.get("/health")
async def health():
    """Health check endpoint (no auth required)."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "channels": AVAILABLE_CHANNELS,
    }


@app.get("/rules/{channel}", response_model=list[RuleDocument])
async def list_rules(
    channel: str,
    fetcher: HtmlFetcher = Depends(get_fetcher),
    _: bool = Depends(verify_api_key),
):
    """Rule documents currently published by the channel."""
    scraper = _scraper(channel, fetcher)
    try:
        return await scraper.list_rules()
    except TransportError as e:
        raise _upstream_error(e) from e


@app.get("/rules/{channel}/details", response_model=RuleDetails)
async def rule_details(
    channel: str,
    url: str = Query(..., description="Rule document URL"),
    fetcher: HtmlFetcher = Depends(get_fetcher),
    _: bool = Depends(verify_api_key),
):
    """Full text and refund conditions of one rule document."""
    scraper = _scraper(channel, fetcher)
    try:
        return await scraper.get_rule_details(url)
    except TransportError as e:
        raise _upstream_error(e) from e


@app.get("/games/{channel}", response_model=list[GameListing])
async def list_games(
    channel: str,
    fetcher: HtmlFetcher = Depends(get_fetcher),
    _: bool = Depends(verify_api_key),
):
    """Active paid games of the channel, enriched from their rule pages."""
    scraper = _scraper(channel, fetcher)
    try:
        return await scraper.list_active_games()
    except TransportError as e:
        raise _upstream_error(e) from e


@app.get("/refundability", response_model=RefundabilityReport)
async def refundability(
    channel: str,
    game_name: str,
    date: str,
    fetcher: HtmlFetcher = Depends(get_fetcher),
    _: bool = Depends(verify_api_key),
):
    """Can a participation to this game on this date be refunded, and how."""
    scraper = _scraper(channel, fetcher)
    try:
        return await check_refundability(scraper, game_name, date)
    except TransportError as e:
        raise _upstream_error(e) from e
