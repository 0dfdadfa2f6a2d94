"""Rebuild an invoice list from a telecom response of unknown shape.

Strategies are tried in a fixed order and the first one returning invoices
wins:

1. structured JSON  ({"invoices": [{id, date, amount, pdfUrl}, ...]})
2. regex over the raw body ("id":"..","date":"..","amount":..)
3. direct fetch of the per-phone invoice endpoint (single "direct_1" guess)
4. HTML anchors paired by position with "Facture du DD/MM/YYYY" labels

Structured sources are more trustworthy than the HTML heuristics, so the
order must not change. Every strategy swallows its own parse errors.
"""
import json
import logging
import re
from datetime import date
from typing import Awaitable, Callable, NamedTuple, Optional

from src.config import config
from src.errors import ParseError, ScraperError
from src.parse.models import InvoiceRecord
from src.parse.pdf_text import is_pdf_bytes
from src.parse.text import parse_amount, parse_date

logger = logging.getLogger(__name__)

INVOICE_TRIPLE_PATTERN = re.compile(r'"id":"([^"]+)","date":"([^"]+)","amount":([\d.]+)')
INVOICE_HREF_PATTERN = re.compile(r'href="(/account/v2/api/SI/invoice/[^"]+)"')
INVOICE_LABEL_DATE_PATTERN = re.compile(r"Facture du (\d{2}/\d{2}/\d{4})")

PDF_EVIDENCE_MARKERS = (".pdf", "application/pdf", "octet-stream")


class DirectFetchResult(NamedTuple):
    """Body of the per-phone invoice endpoint."""

    content: bytes
    content_type: str = ""


DirectFetch = Callable[[str], Awaitable[DirectFetchResult]]
InvoiceStrategy = Callable[[str, str], Awaitable[list[InvoiceRecord]]]


def _site_root(invoice_api_base: str) -> str:
    """https://mobile.free.fr/account/v2/api/SI -> https://mobile.free.fr"""
    marker = invoice_api_base.find("/account/")
    return invoice_api_base[:marker] if marker != -1 else invoice_api_base.rstrip("/")


def _coerce_amount(value) -> float:
    """Non-numeric amounts count as 0.0, the invoice itself is kept."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug(f"[INVOICES] unreadable amount {value!r}, using 0.0")
        return 0.0


def extract_structured_json(body: str, phone_number: str) -> list[InvoiceRecord]:
    """Strategy 1: top-level {"invoices": [...]} payload."""
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, TypeError, ValueError, RecursionError) as e:
        logger.debug(f"[INVOICES] body is not JSON: {str(e)[:100]}")
        return []

    if not isinstance(payload, dict) or not isinstance(payload.get("invoices"), list):
        return []

    invoices = []
    for item in payload["invoices"]:
        try:
            if not isinstance(item, dict):
                raise ParseError("invoice entry is not an object")
            for key in ("id", "date", "pdfUrl"):
                if not item.get(key):
                    raise ParseError(f"missing {key}")
            amount = _coerce_amount(item.get("amount"))
            invoices.append(
                InvoiceRecord(
                    id=str(item["id"]),
                    phone_number=phone_number,
                    date=parse_date(str(item["date"]), ("%Y-%m-%d",)),
                    amount=amount,
                    pdf_url=str(item["pdfUrl"]),
                )
            )
        except (ParseError, TypeError, ValueError) as e:
            logger.debug(f"[INVOICES] skipping invoice entry: {e}")
            continue
    return invoices


def extract_regex_triples(
    body: str,
    phone_number: str,
    invoice_api_base: str,
    today: Callable[[], date] = date.today,
) -> list[InvoiceRecord]:
    """Strategy 2: "id","date","amount" triples anywhere in the body."""
    invoices = []
    for match in INVOICE_TRIPLE_PATTERN.finditer(body or ""):
        invoice_id, date_str, amount_str = match.groups()
        try:
            invoice_date = parse_date(date_str, ("%Y-%m-%d",))
        except ParseError:
            invoice_date = today()
        amount = parse_amount(amount_str)
        invoices.append(
            InvoiceRecord(
                id=invoice_id,
                phone_number=phone_number,
                date=invoice_date,
                amount=amount if amount is not None else 0.0,
                pdf_url=f"{invoice_api_base}/invoice/{invoice_id}",
            )
        )
    return invoices


def has_pdf_evidence(result: DirectFetchResult) -> bool:
    """Content-type, body markers or the %PDF signature."""
    content_type = (result.content_type or "").lower()
    if "pdf" in content_type or "octet-stream" in content_type:
        return True
    if is_pdf_bytes(result.content):
        return True
    text = result.content.decode("utf-8", errors="ignore")
    return any(marker in text for marker in PDF_EVIDENCE_MARKERS)


def extract_html_anchors(
    body: str,
    phone_number: str,
    site_root: str,
    today: Callable[[], date] = date.today,
) -> list[InvoiceRecord]:
    """
    Strategy 4: invoice PDF anchors, dated by position.

    The n-th link is paired with the n-th "Facture du" label. Mis-pairs when
    the two lists differ in length or order.
    """
    dates = INVOICE_LABEL_DATE_PATTERN.findall(body or "")
    invoices = []
    for index, match in enumerate(INVOICE_HREF_PATTERN.finditer(body or "")):
        invoice_date = today()
        if index < len(dates):
            try:
                invoice_date = parse_date(dates[index], ("%d/%m/%Y",))
            except ParseError as e:
                logger.debug(f"[INVOICES] bad label date: {e}")
        invoices.append(
            InvoiceRecord(
                id=f"html_{index}",
                phone_number=phone_number,
                date=invoice_date,
                amount=0.0,
                pdf_url=f"{site_root}{match.group(1)}",
            )
        )
    return invoices


class InvoiceExtractionPipeline:
    """Ordered chain of invoice extraction strategies."""

    def __init__(
        self,
        direct_fetch: Optional[DirectFetch] = None,
        invoice_api_base: Optional[str] = None,
        today: Callable[[], date] = date.today,
    ):
        self.direct_fetch = direct_fetch
        self.invoice_api_base = (invoice_api_base or config.INVOICE_API_BASE).rstrip("/")
        self.site_root = _site_root(self.invoice_api_base)
        self.today = today
        self.strategies: list[tuple[str, InvoiceStrategy]] = [
            ("structured_json", self._structured_json),
            ("regex", self._regex),
            ("direct_fetch", self._direct_fetch),
            ("html_anchor", self._html_anchor),
        ]

    async def extract(self, response_body: str, phone_number: str) -> list[InvoiceRecord]:
        """Run the strategies in order; first non-empty result wins."""
        for name, strategy in self.strategies:
            try:
                invoices = await strategy(response_body or "", phone_number)
            except ScraperError as e:
                logger.debug(f"[INVOICES] strategy={name} failed: {e}")
                invoices = []
            if invoices:
                logger.info(f"[INVOICES] strategy={name} found={len(invoices)}")
                return invoices
            logger.debug(f"[INVOICES] strategy={name} found nothing")
        logger.info("[INVOICES] no invoice found by any strategy")
        return []

    async def _structured_json(self, body: str, phone_number: str) -> list[InvoiceRecord]:
        return extract_structured_json(body, phone_number)

    async def _regex(self, body: str, phone_number: str) -> list[InvoiceRecord]:
        return extract_regex_triples(body, phone_number, self.invoice_api_base, self.today)

    async def _direct_fetch(self, body: str, phone_number: str) -> list[InvoiceRecord]:
        if self.direct_fetch is None:
            return []
        try:
            result = await self.direct_fetch(phone_number)
        except ScraperError as e:
            logger.warning(f"[INVOICES] direct invoice fetch failed: {e}")
            return []
        if not has_pdf_evidence(result):
            return []
        return [
            InvoiceRecord(
                id="direct_1",
                phone_number=phone_number,
                date=self.today(),
                amount=0.0,
                pdf_url=f"{self.invoice_api_base}/invoice/{phone_number}",
            )
        ]

    async def _html_anchor(self, body: str, phone_number: str) -> list[InvoiceRecord]:
        return extract_html_anchors(body, phone_number, self.site_root, self.today)
