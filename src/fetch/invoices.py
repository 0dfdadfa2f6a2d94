"""Telecom account client: list, download and analyze invoices."""
import logging
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, Optional

import aiofiles

from src.auth.session import AuthenticatedHttpSession
from src.config import INVOICES_DIR, config
from src.errors import ParseError, TransportError
from src.fetch.client import HtmlFetcher
from src.fetch.endpoints import get_invoice_list_url, get_invoice_page_referer, get_invoice_url
from src.parse.invoice_fees import find_game_fees
from src.parse.invoices import DirectFetchResult, InvoiceExtractionPipeline
from src.parse.models import GameListing, InvoiceDownload, InvoiceGameFee, InvoiceRecord, InvoiceStatus
from src.parse.pdf_text import PdfTextExtractor
from src.store.invoice_files import write_invoice_pdf

logger = logging.getLogger(__name__)


class InvoiceClient:
    """Invoice operations for one telecom account session."""

    def __init__(
        self,
        fetcher: HtmlFetcher,
        session: AuthenticatedHttpSession,
        invoice_api_base: Optional[str] = None,
        site_base: Optional[str] = None,
        today: Callable[[], date] = date.today,
    ):
        self.fetcher = fetcher
        self.session = session
        self.invoice_api_base = (invoice_api_base or config.INVOICE_API_BASE).rstrip("/")
        self.site_base = (site_base or config.FREE_BASE_URL).rstrip("/")
        self.pdf_extractor = PdfTextExtractor()
        self.pipeline = InvoiceExtractionPipeline(
            direct_fetch=self._fetch_direct,
            invoice_api_base=self.invoice_api_base,
            today=today,
        )

    def _headers(self, accept: str) -> dict[str, str]:
        return self.session.apply({
            "Accept": accept,
            "Referer": get_invoice_page_referer(self.site_base),
            "X-Requested-With": "XMLHttpRequest",
        })

    async def fetch_invoices(self, phone_number: str) -> list[InvoiceRecord]:
        """List the account invoices. TransportError on the list request propagates."""
        url = get_invoice_list_url(self.invoice_api_base)
        logger.info(f"[INVOICES] fetching invoice list for {phone_number}")
        body = await self.fetcher.get_text(url, headers=self._headers("application/json, text/plain, */*"))
        return await self.pipeline.extract(body, phone_number)

    async def _fetch_direct(self, phone_number: str) -> DirectFetchResult:
        url = get_invoice_url(phone_number, self.invoice_api_base)
        response = await self.fetcher.get(url, headers=self._headers("application/pdf, application/octet-stream, */*"))
        return DirectFetchResult(response.content, response.headers.get("content-type", ""))

    async def download_invoice(self, invoice: InvoiceRecord, dest_dir: Path = INVOICES_DIR) -> InvoiceDownload:
        """Download the invoice PDF. The bytes are written even when they are not a PDF."""
        logger.info(f"[INVOICES] downloading invoice {invoice.id} from {invoice.pdf_url}")
        content = await self.fetcher.get_bytes(
            invoice.pdf_url,
            headers=self._headers("application/pdf, application/octet-stream"),
        )
        if not content:
            raise TransportError(f"Empty response for invoice {invoice.id}", url=invoice.pdf_url)

        path, is_suspect = await write_invoice_pdf(invoice.id, content, dest_dir)
        downloaded = invoice.model_copy(update={
            "status": InvoiceStatus.DOWNLOADED,
            "local_pdf_path": str(path),
        })
        return InvoiceDownload(invoice=downloaded, path=str(path), is_suspect=is_suspect)

    async def analyze_invoice(
        self,
        download: InvoiceDownload,
        known_games: Iterable[GameListing] = (),
    ) -> list[InvoiceGameFee]:
        """Game fees found in a downloaded invoice. Unreadable PDFs give no fees."""
        async with aiofiles.open(download.path, "rb") as f:
            data = await f.read()
        try:
            text = await self.pdf_extractor.extract_async(data)
        except ParseError as e:
            logger.warning(f"[INVOICES] cannot read invoice {download.invoice.id}: {e}")
            return []
        return find_game_fees(text, download.invoice, known_games)
