"""Shared machinery of the per-channel rule and game scrapers."""
import asyncio
import logging
import re
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from selectolax.parser import HTMLParser

from src.config import config
from src.errors import ScraperError
from src.fetch.client import HtmlFetcher
from src.parse.models import DEFAULT_DEADLINE_DAYS, GameListing, GameType, RuleDetails, RuleDocument
from src.parse.refund_info import RefundInfoExtractor
from src.parse.rule_section import RuleSectionLocator
from src.parse.text import absolute_url, first_euro_amount, node_text, normalize_show_id

logger = logging.getLogger(__name__)

GAME_KEYWORDS = ("règlement", "reglement", "jeu")
RULE_KEYWORDS = ("règlement", "reglement")

PHONE_PATTERN = re.compile(r"\b(3[0-9]{3}|7[0-9]{4})\b")
DETAIL_DEADLINE_PATTERN = re.compile(r"dans un délai de (\d+)")


class ChannelScraper(Protocol):
    """Rule and game scraping for one broadcaster."""

    channel: str

    async def list_rules(self) -> list[RuleDocument]:
        ...

    async def get_rule_details(self, url: str) -> RuleDetails:
        ...

    async def list_active_games(self) -> list[GameListing]:
        ...


@dataclass(frozen=True)
class ChannelProfile:
    """Selectors, URLs and seed values of one broadcaster."""

    channel: str
    base_url: str
    games_url: str
    entry_selector: str
    entry_title_selector: str
    detail_selectors: tuple[str, ...]
    phone_number: str
    cost: float
    refund_address: str
    participation_method: str
    address_window: int
    address_pattern: re.Pattern
    # Entries matched by entry_selector are games even without a keyword
    entries_are_games: bool = False


def is_rule_title(title: str) -> bool:
    lowered = (title or "").lower()
    return any(keyword in lowered for keyword in RULE_KEYWORDS)


def is_game_title(title: str) -> bool:
    lowered = (title or "").lower()
    return any(keyword in lowered for keyword in GAME_KEYWORDS)


def detect_game_type(text: str) -> Optional[GameType]:
    """SMS and call mentions together make a mixed game. None when nothing is mentioned."""
    has_sms = "SMS" in text
    has_call = "appel" in text.lower()
    if has_sms and has_call:
        return GameType.MIXED
    if has_sms:
        return GameType.SMS
    if has_call:
        return GameType.PHONE_CALL
    lowered = text.lower()
    if "internet" in lowered or "web" in lowered:
        return GameType.WEB
    return None


def find_refund_address(text: str, window: int, pattern: re.Pattern) -> Optional[str]:
    """Postal code and locality shortly after the first "remboursement"."""
    index = text.find("remboursement")
    if index == -1:
        return None
    match = pattern.search(text[index:index + window])
    return match.group(0) if match else None


def enrich_listing(listing: GameListing, detail_text: str, profile: ChannelProfile) -> GameListing:
    """
    Override seed values with what the detail page states.

    Each field is independent: a field that cannot be found keeps its seed.
    """
    updates = {}

    phone = PHONE_PATTERN.search(detail_text)
    if phone:
        updates["phone_number"] = phone.group(1)

    cost = first_euro_amount(detail_text)
    if cost is not None:
        updates["cost"] = cost

    address = find_refund_address(detail_text, profile.address_window, profile.address_pattern)
    if address:
        updates["refund_address"] = address

    game_type = detect_game_type(detail_text)
    if game_type is not None:
        updates["type"] = game_type

    deadline = DETAIL_DEADLINE_PATTERN.search(detail_text)
    if deadline:
        updates["reimbursement_deadline"] = int(deadline.group(1))

    if not updates:
        return listing
    return listing.model_copy(update=updates)


class BaseChannelScraper:
    """
    Listing page -> seed GameListings -> detail page enrichment.

    Subclasses provide the rule listing, the rule text and the show title
    extraction; everything else is driven by the ChannelProfile.
    """

    profile: ChannelProfile
    log_tag: str = "[CHANNEL]"

    def __init__(
        self,
        fetcher: HtmlFetcher,
        concurrency: Optional[int] = None,
        clock_ms=None,
    ):
        self.fetcher = fetcher
        self.concurrency = concurrency or config.CONCURRENCY
        self.clock_ms = clock_ms or (lambda: int(time.time() * 1000))
        self.locator = RuleSectionLocator()
        self.refund_extractor = RefundInfoExtractor()

    @property
    def channel(self) -> str:
        return self.profile.channel

    def extract_show_title(self, title: str) -> str:
        raise NotImplementedError

    def extract_image_url(self, entry) -> Optional[str]:
        return None

    async def fetch_rule_text(self, url: str) -> str:
        raise NotImplementedError

    async def list_rules(self) -> list[RuleDocument]:
        raise NotImplementedError

    def build_rule_details(self, url: str, content: str) -> RuleDetails:
        section = self.locator.locate(content)
        refund_info = self.refund_extractor.extract(section)
        logger.info(
            f"{self.log_tag} rule {url}: refundable={refund_info.is_refundable} "
            f"deadline={refund_info.deadline_days}"
        )
        return RuleDetails(url=url, channel=self.channel, content=content, refund_info=refund_info)

    async def get_rule_details(self, url: str) -> RuleDetails:
        """Fetch a rule document and parse its refund clause. TransportError propagates."""
        content = await self.fetch_rule_text(url)
        return self.build_rule_details(url, content)

    def build_seed_listing(self, index: int, title: str, rules_url: str, image_url: Optional[str], stamp: int) -> GameListing:
        profile = self.profile
        show_title = self.extract_show_title(title)
        return GameListing(
            id=f"{profile.channel}_{stamp}_{index}",
            show_id=normalize_show_id(show_title),
            title=f"{show_title} - Question du jour" if show_title else title,
            description=f"Jeu interactif de l'émission {show_title or title}",
            type=GameType.SMS,
            channel=profile.channel,
            phone_number=profile.phone_number,
            cost=profile.cost,
            refund_address=profile.refund_address,
            rules_url=rules_url,
            image_url=image_url,
            participation_method=profile.participation_method,
            reimbursement_deadline=DEFAULT_DEADLINE_DAYS,
        )

    def parse_game_entries(self, html: str) -> list[GameListing]:
        """Seed listings from the games listing page. Broken entries are skipped."""
        profile = self.profile
        parser = HTMLParser(html)
        stamp = self.clock_ms()
        listings = []
        for index, entry in enumerate(parser.css(profile.entry_selector)):
            try:
                title = node_text(entry, profile.entry_title_selector)
                if not title:
                    continue
                if not profile.entries_are_games and not is_game_title(title):
                    continue
                anchor = entry.css_first("a")
                link = absolute_url(anchor.attributes.get("href") if anchor else None, profile.base_url)
                if not link:
                    logger.debug(f"{self.log_tag} entry {index} has no link, skipping")
                    continue
                listings.append(self.build_seed_listing(index, title, link, self.extract_image_url(entry), stamp))
            except (ScraperError, ValueError) as e:
                logger.warning(f"{self.log_tag} skipping listing entry {index}: {e}")
                continue
        return listings

    def detail_text(self, html: str) -> str:
        parser = HTMLParser(html)
        for selector in self.profile.detail_selectors:
            text = node_text(parser, selector)
            if text:
                return text
        return ""

    async def enrich_listings(self, listings: list[GameListing]) -> list[GameListing]:
        """Visit every detail page with bounded concurrency, keeping seeds on failure."""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def enrich(listing: GameListing) -> GameListing:
            async with semaphore:
                try:
                    html = await self.fetcher.get_text(listing.rules_url)
                except ScraperError as e:
                    logger.warning(f"{self.log_tag} detail page failed for {listing.title}: {e}")
                    return listing
                return enrich_listing(listing, self.detail_text(html), self.profile)

        return list(await asyncio.gather(*(enrich(listing) for listing in listings)))

    async def list_active_games(self) -> list[GameListing]:
        """Active games of the channel. A failing listing page raises TransportError."""
        html = await self.fetcher.get_text(self.profile.games_url)
        listings = self.parse_game_entries(html)
        logger.info(f"{self.log_tag} {len(listings)} games found")
        return await self.enrich_listings(listings)
