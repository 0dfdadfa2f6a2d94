"""M6 rules (PDF documents) and games (game cards)."""
import logging
import re
from typing import Optional

from selectolax.parser import HTMLParser, Node

from src.errors import ParseError
from src.fetch.endpoints import M6_BASE_URL, M6_GAMES_URL, M6_RULES_BASE_URL, M6_RULES_URL
from src.parse.models import RuleDocument
from src.parse.pdf_text import PdfTextExtractor, is_pdf_bytes
from src.parse.text import absolute_url
from src.scrapers.base import BaseChannelScraper, ChannelProfile, is_rule_title

logger = logging.getLogger(__name__)

M6_PROFILE = ChannelProfile(
    channel="m6",
    base_url=M6_BASE_URL,
    games_url=M6_GAMES_URL,
    entry_selector=".game-item",
    entry_title_selector=".game-item__title",
    detail_selectors=(".game-rules", ".game-content"),
    phone_number="74000",
    cost=0.99,
    refund_address="M6 - Service Remboursement, 89 avenue Charles de Gaulle, 92575 Neuilly-sur-Seine",
    participation_method="Envoyez SMS au 74000 ou appelez le 3626",
    address_window=300,
    address_pattern=re.compile(r"\b\d{5}\s+\w+(?:-\w+)*\b"),
    entries_are_games=True,
)


class M6Scraper(BaseChannelScraper):
    profile = M6_PROFILE
    log_tag = "[M6]"

    def __init__(self, fetcher, concurrency=None, clock_ms=None, pdf_extractor: Optional[PdfTextExtractor] = None):
        super().__init__(fetcher, concurrency=concurrency, clock_ms=clock_ms)
        self.pdf_extractor = pdf_extractor or PdfTextExtractor()

    def extract_show_title(self, title: str) -> str:
        return title.split("-")[0].strip() or title

    def extract_image_url(self, entry: Node) -> Optional[str]:
        img = entry.css_first("img")
        if img is None:
            return None
        src = img.attributes.get("src") or img.attributes.get("data-src")
        return absolute_url(src, M6_BASE_URL)

    async def list_rules(self) -> list[RuleDocument]:
        html = await self.fetcher.get_text(M6_RULES_URL)
        parser = HTMLParser(html)
        rules = []
        for anchor in parser.css('a[href*="reglement"]'):
            title = anchor.text(separator=" ", strip=True)
            if not is_rule_title(title):
                continue
            rules.append(
                RuleDocument(
                    title=title,
                    link=absolute_url(anchor.attributes.get("href"), M6_RULES_BASE_URL),
                    channel=self.channel,
                )
            )
        logger.info(f"[M6] {len(rules)} rule documents listed")
        return rules

    async def fetch_rule_text(self, url: str) -> str:
        """PDF text, or the page text when the link serves HTML. Unreadable PDFs give ""."""
        data = await self.fetcher.get_bytes(url)
        if not is_pdf_bytes(data):
            logger.debug(f"[M6] {url} is not a PDF, reading HTML body")
            parser = HTMLParser(data.decode("utf-8", errors="ignore"))
            return parser.body.text(separator=" ", strip=True) if parser.body else ""
        try:
            return await self.pdf_extractor.extract_async(data)
        except ParseError as e:
            logger.warning(f"[M6] unreadable rule PDF {url}: {e}")
            return ""
