"""Shared fixtures: mocked HTTP fetchers and generated PDF documents."""
import os
import tempfile

# Keep exports and downloads out of the project tree
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="tvgame-tests-"))

import httpx
import pytest

from src.fetch.client import FetchSettings, HtmlFetcher

TEST_SETTINGS = FetchSettings(user_agent="tvgame-tests", accept_language="fr-FR", timeout=5.0)


def _escape_pdf_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(lines: list[str]) -> bytes:
    """Single page PDF, one text line per entry, Helvetica with WinAnsi encoding."""
    stream = b"\n".join(
        b"BT /F1 11 Tf 40 %d Td (%s) Tj ET" % (800 - 20 * i, _escape_pdf_text(line).encode("cp1252"))
        for i, line in enumerate(lines)
    )
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 842] "
        b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>",
        b"<< /Length %d >>\nstream\n%s\nendstream" % (len(stream), stream),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n%s\nendobj\n" % (number, body)
    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_offset)
    return bytes(out)


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def make_fetcher():
    """HtmlFetcher factory backed by an httpx.MockTransport handler."""

    def _make(handler) -> HtmlFetcher:
        return HtmlFetcher(TEST_SETTINGS, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def routes_handler():
    """
    Handler factory serving fixed responses by URL path; unknown paths give 404.

    Route values are (status, body) or (status, body, headers); body is str or bytes.
    """

    def _make(routes: dict[str, tuple], calls: list | None = None):
        def handler(request: httpx.Request) -> httpx.Response:
            if calls is not None:
                calls.append(request)
            route = routes.get(request.url.path)
            if route is None:
                return httpx.Response(404, text="not found")
            status, body, *rest = route
            headers = rest[0] if rest else None
            content = body.encode("utf-8") if isinstance(body, str) else body
            return httpx.Response(status, content=content, headers=headers)

        return handler

    return _make
