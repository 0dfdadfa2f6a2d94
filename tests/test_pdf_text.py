"""Tests for PDF text extraction."""
import pytest

from src.errors import ParseError
from src.parse.pdf_text import PdfTextExtractor, is_pdf_bytes


def test_is_pdf_bytes():
    """Test the %PDF signature check."""
    assert is_pdf_bytes(b"%PDF-1.7\n...")
    assert not is_pdf_bytes(b"<html></html>")
    assert not is_pdf_bytes(b"")
    assert not is_pdf_bytes(None)


def test_extract_text(make_pdf):
    """Test text of a generated PDF."""
    data = make_pdf(["Reglement du jeu", "ARTICLE 1 - OBJET."])
    text = PdfTextExtractor().extract(data)

    assert "Reglement du jeu" in text
    assert "ARTICLE 1 - OBJET." in text
    assert text.index("Reglement") < text.index("ARTICLE")


def test_extract_pages_one_block_per_page(make_pdf):
    """Test one text block per page."""
    pages = PdfTextExtractor().extract_pages(make_pdf(["Une seule page"]))

    assert len(pages) == 1
    assert "Une seule page" in pages[0]


def test_extract_invalid_pdf_raises():
    """Test unreadable bytes raise ParseError."""
    with pytest.raises(ParseError):
        PdfTextExtractor().extract(b"%PDF-1.4 this is not really a pdf")


def test_extract_empty_raises():
    """Test empty payload raises ParseError."""
    with pytest.raises(ParseError):
        PdfTextExtractor().extract(b"")


@pytest.mark.asyncio
async def test_extract_async(make_pdf):
    """Test extraction off the event loop."""
    text = await PdfTextExtractor().extract_async(make_pdf(["Bonjour"]))
    assert "Bonjour" in text
