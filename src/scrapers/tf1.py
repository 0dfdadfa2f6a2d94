"""TF1 rules and games, both published as news cards."""
import logging
import re

from selectolax.parser import HTMLParser

from src.fetch.endpoints import TF1_BASE_URL, TF1_GAMES_URL, TF1_RULES_URL
from src.parse.models import RuleDocument
from src.parse.text import absolute_url, node_text
from src.scrapers.base import BaseChannelScraper, ChannelProfile, is_rule_title

logger = logging.getLogger(__name__)

TF1_PROFILE = ChannelProfile(
    channel="tf1",
    base_url=TF1_BASE_URL,
    games_url=TF1_GAMES_URL,
    entry_selector=".card-news",
    entry_title_selector=".card-news__title",
    detail_selectors=(".article__body",),
    phone_number="71414",
    cost=0.99,
    refund_address="TF1 - Service Remboursement, 92100 Boulogne",
    participation_method="Envoyez SMS au 71414 ou appelez le 3680",
    address_window=200,
    address_pattern=re.compile(r"\b\d{5}\s+\w+\b"),
)

SHOW_QUOTE_PATTERN = re.compile(r"«([^»]*)»")
# Only the first occurrence of each word is dropped
TITLE_NOISE_PATTERNS = [re.compile(word, re.IGNORECASE) for word in ("règlement", "reglement", "jeu", "interactif")]


class TF1Scraper(BaseChannelScraper):
    profile = TF1_PROFILE
    log_tag = "[TF1]"

    def extract_show_title(self, title: str) -> str:
        """Quoted show name, or the card title stripped of rule vocabulary."""
        quoted = SHOW_QUOTE_PATTERN.search(title)
        if quoted and quoted.group(1).strip():
            return quoted.group(1).strip()
        show_title = title
        for pattern in TITLE_NOISE_PATTERNS:
            show_title = pattern.sub("", show_title, count=1)
        return show_title.strip()

    async def list_rules(self) -> list[RuleDocument]:
        html = await self.fetcher.get_text(TF1_RULES_URL)
        parser = HTMLParser(html)
        rules = []
        for card in parser.css(".card-news"):
            title = node_text(card, ".card-news__title")
            # Winner lists share the page
            if not is_rule_title(title):
                continue
            anchor = card.css_first("a")
            rules.append(
                RuleDocument(
                    title=title,
                    link=absolute_url(anchor.attributes.get("href") if anchor else None, TF1_BASE_URL),
                    channel=self.channel,
                    date=node_text(card, ".card-news__date") or None,
                )
            )
        logger.info(f"[TF1] {len(rules)} rule documents listed")
        return rules

    async def fetch_rule_text(self, url: str) -> str:
        html = await self.fetcher.get_text(url)
        return node_text(HTMLParser(html), ".article__content")
