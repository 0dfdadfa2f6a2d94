"""Tests for the telecom invoice client."""
from datetime import date
from pathlib import Path

import pytest

from src.auth.session import CookieSession
from src.errors import TransportError
from src.fetch.invoices import InvoiceClient
from src.parse.models import GameListing, InvoiceDownload, InvoiceRecord, InvoiceStatus

API_BASE = "https://mobile.free.fr/account/v2/api/SI"
PHONE = "0612345678"
TODAY = date(2024, 5, 1)

LIST_PATH = "/account/v2/api/SI/invoices"
JSON_BODY = (
    '{"invoices":[{"id":"abc","date":"2024-03-01","amount":12.5,'
    '"pdfUrl":"https://mobile.free.fr/files/abc.pdf"}]}'
)


def make_client(fetcher) -> InvoiceClient:
    return InvoiceClient(
        fetcher,
        CookieSession("ASP.NET_SessionId=xyz"),
        invoice_api_base=API_BASE,
        site_base="https://mobile.free.fr",
        today=lambda: TODAY,
    )


def make_invoice(pdf_url: str = "https://mobile.free.fr/files/abc.pdf") -> InvoiceRecord:
    return InvoiceRecord(id="abc", phone_number=PHONE, date=date(2024, 3, 1), amount=12.5, pdf_url=pdf_url)


@pytest.mark.asyncio
async def test_fetch_invoices_sends_session_headers(make_fetcher, routes_handler):
    """Test the list request carries the session and browser headers."""
    calls = []
    handler = routes_handler({LIST_PATH: (200, JSON_BODY, {"content-type": "application/json"})}, calls)

    async with make_fetcher(handler) as fetcher:
        invoices = await make_client(fetcher).fetch_invoices(PHONE)

    assert [i.id for i in invoices] == ["abc"]
    request = calls[0]
    assert request.headers["cookie"] == "ASP.NET_SessionId=xyz"
    assert request.headers["x-requested-with"] == "XMLHttpRequest"
    assert request.headers["referer"] == "https://mobile.free.fr/account/v2/mes-factures"
    assert request.headers["user-agent"] == "tvgame-tests"


@pytest.mark.asyncio
async def test_fetch_invoices_transport_error_propagates(make_fetcher, routes_handler):
    """Test a failing list request is a hard failure."""
    handler = routes_handler({LIST_PATH: (500, "oops")})

    async with make_fetcher(handler) as fetcher:
        with pytest.raises(TransportError) as exc_info:
            await make_client(fetcher).fetch_invoices(PHONE)

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_fetch_invoices_direct_fetch(make_fetcher, routes_handler):
    """Test the per-phone endpoint is tried when the list body has no invoice."""
    handler = routes_handler({
        LIST_PATH: (200, "<html><body>Espace abonné</body></html>"),
        f"/account/v2/api/SI/invoice/{PHONE}": (200, b"%PDF-1.4 ...", {"content-type": "application/pdf"}),
    })

    async with make_fetcher(handler) as fetcher:
        invoices = await make_client(fetcher).fetch_invoices(PHONE)

    assert [i.id for i in invoices] == ["direct_1"]
    assert invoices[0].date == TODAY


@pytest.mark.asyncio
async def test_fetch_invoices_direct_fetch_404_then_html(make_fetcher, routes_handler):
    """Test a failing direct fetch falls back to the HTML anchors."""
    body = '<a href="/account/v2/api/SI/invoice/42">Facture du 15/04/2024</a>'
    handler = routes_handler({LIST_PATH: (200, body)})

    async with make_fetcher(handler) as fetcher:
        invoices = await make_client(fetcher).fetch_invoices(PHONE)

    assert [i.id for i in invoices] == ["html_0"]
    assert invoices[0].date == date(2024, 4, 15)


@pytest.mark.asyncio
async def test_download_invoice_pdf(make_fetcher, routes_handler, tmp_path):
    """Test a PDF download is written and marked downloaded."""
    handler = routes_handler({"/files/abc.pdf": (200, b"%PDF-1.4 content")})

    async with make_fetcher(handler) as fetcher:
        download = await make_client(fetcher).download_invoice(make_invoice(), tmp_path)

    path = Path(download.path)
    assert path == tmp_path / "invoice_abc.pdf"
    assert path.read_bytes() == b"%PDF-1.4 content"
    assert download.is_suspect is False
    assert download.invoice.status == InvoiceStatus.DOWNLOADED
    assert download.invoice.local_pdf_path == str(path)


@pytest.mark.asyncio
async def test_download_invoice_not_pdf_is_written_anyway(make_fetcher, routes_handler, tmp_path):
    """Test non-PDF bytes are still saved and flagged suspect."""
    handler = routes_handler({"/files/abc.pdf": (200, "<html>Session expirée</html>")})

    async with make_fetcher(handler) as fetcher:
        download = await make_client(fetcher).download_invoice(make_invoice(), tmp_path)

    assert download.is_suspect is True
    assert Path(download.path).read_text(encoding="utf-8") == "<html>Session expirée</html>"


@pytest.mark.asyncio
async def test_download_invoice_empty_body(make_fetcher, routes_handler, tmp_path):
    """Test an empty response is a transport failure."""
    handler = routes_handler({"/files/abc.pdf": (200, b"")})

    async with make_fetcher(handler) as fetcher:
        with pytest.raises(TransportError):
            await make_client(fetcher).download_invoice(make_invoice(), tmp_path)

    assert not (tmp_path / "invoice_abc.pdf").exists()


class FakePdfExtractor:
    def __init__(self, text):
        self.text = text

    async def extract_async(self, data: bytes) -> str:
        return self.text


@pytest.mark.asyncio
async def test_analyze_invoice_known_game(make_fetcher, routes_handler, tmp_path):
    """Test game fees are detected from the invoice text."""
    pdf_path = tmp_path / "invoice_abc.pdf"
    pdf_path.write_bytes(b"%PDF-1.4")
    download = InvoiceDownload(invoice=make_invoice(), path=str(pdf_path))
    game = GameListing(
        id="tf1_1_0", show_id="koh-lanta", title="Koh Lanta - Question du jour",
        channel="tf1", phone_number="71414", rules_url="https://www.tf1.fr/r",
    )

    async with make_fetcher(routes_handler({})) as fetcher:
        client = make_client(fetcher)
        client.pdf_extractor = FakePdfExtractor("12/03 SMS+ 71414 KOH LANTA 0,99 €\nTotal 19,99 €")
        fees = await client.analyze_invoice(download, [game])

    assert len(fees) == 1
    assert fees[0].game_id == "tf1_1_0"
    assert fees[0].amount == 0.99
    assert fees[0].invoice_id == "abc"


@pytest.mark.asyncio
async def test_analyze_invoice_unreadable_pdf(make_fetcher, routes_handler, tmp_path):
    """Test an unreadable PDF gives no fees."""
    pdf_path = tmp_path / "invoice_abc.pdf"
    pdf_path.write_bytes(b"<html>not a pdf</html>")
    download = InvoiceDownload(invoice=make_invoice(), path=str(pdf_path), is_suspect=True)

    async with make_fetcher(routes_handler({})) as fetcher:
        fees = await make_client(fetcher).analyze_invoice(download)

    assert fees == []


def test_cookie_session_apply():
    """Test the cookie header is added without mutating the input."""
    headers = {"Accept": "application/json"}
    applied = CookieSession("sid=1").apply(headers)

    assert applied == {"Accept": "application/json", "Cookie": "sid=1"}
    assert "Cookie" not in headers
    assert CookieSession(None).apply(headers) == headers


@pytest.mark.asyncio
async def test_download_invoice_with_path_like_id(make_fetcher, routes_handler, tmp_path):
    """Test an upstream id containing slashes is saved under the destination directory."""
    handler = routes_handler({"/files/abc.pdf": (200, b"%PDF-1.4 content")})
    invoice = InvoiceRecord(
        id="a/../../b", phone_number=PHONE, date=date(2024, 3, 1), amount=12.5,
        pdf_url="https://mobile.free.fr/files/abc.pdf",
    )

    async with make_fetcher(handler) as fetcher:
        download = await make_client(fetcher).download_invoice(invoice, tmp_path)

    path = Path(download.path)
    assert path.parent == tmp_path
    assert path.read_bytes() == b"%PDF-1.4 content"
    assert download.invoice.id == "a/../../b"
