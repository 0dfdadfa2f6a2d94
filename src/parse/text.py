"""Text helpers shared by the scrapers and extractors."""
import logging
import re
from datetime import date, datetime
from urllib.parse import urljoin, urlparse

from selectolax.parser import HTMLParser, Node

from src.errors import ParseError

logger = logging.getLogger(__name__)

AMOUNT_EURO_PATTERN = re.compile(r"(\d+[.,]\d{2})\s*€")


def normalize_show_id(show_title: str | None) -> str:
    """Slug used to group games of the same show."""
    if not show_title:
        return "unknown"
    slug = re.sub(r"[^a-z0-9]", "-", show_title.lower())
    slug = re.sub(r"-+", "-", slug).strip("-")
    return slug or "unknown"


def parse_date(date_str: str, formats: tuple[str, ...] = ("%Y-%m-%d",)) -> date:
    """Parse a date string, raising ParseError if no format matches."""
    if not date_str:
        raise ParseError("empty date")
    for fmt in formats:
        try:
            return datetime.strptime(date_str.strip(), fmt).date()
        except ValueError:
            continue
    raise ParseError(f"unparsable date: {date_str!r}")


def parse_amount(text: str | None) -> float | None:
    """Extract numeric value from text (handles French number format)."""
    if not text:
        return None
    cleaned = re.sub(r"[\s\u00a0\u202f]", "", text).replace(",", ".")
    match = re.search(r"\d+(?:\.\d+)?", cleaned)
    if match:
        try:
            return float(match.group())
        except ValueError:
            pass
    return None


def first_euro_amount(text: str) -> float | None:
    """First "0,99 €" style amount in text."""
    match = AMOUNT_EURO_PATTERN.search(text or "")
    if not match:
        return None
    return parse_amount(match.group(1))


def node_text(parser: HTMLParser | Node, selector: str, default: str = "") -> str:
    """Text of the first matching element, words separated by spaces."""
    node = parser.css_first(selector)
    if node is None:
        return default
    return node.text(separator=" ", strip=True)


def absolute_url(url: str | None, base_url: str) -> str | None:
    """Normalize URL to absolute form."""
    if not url or url.startswith("#") or url.startswith("javascript:"):
        return None

    url = url.strip()

    if url.startswith("http://") or url.startswith("https://"):
        return url
    elif url.startswith("//"):
        parsed = urlparse(base_url)
        return f"{parsed.scheme}:{url}"
    elif url.startswith("/"):
        parsed = urlparse(base_url)
        return f"{parsed.scheme}://{parsed.netloc}{url}"
    else:
        return urljoin(base_url, url)
