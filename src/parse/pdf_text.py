"""Plain text extraction from PDF bytes."""
import asyncio
import io
import logging

import pdfplumber

from src.errors import ParseError

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


def is_pdf_bytes(data: bytes | None) -> bool:
    """Check the %PDF signature."""
    return bool(data) and data[:4] == PDF_MAGIC


class PdfTextExtractor:
    """Extracts the text of every page of a PDF document."""

    def extract_pages(self, data: bytes) -> list[str]:
        """Return one text block per page. Raises ParseError on unreadable PDFs."""
        if not data:
            raise ParseError("empty PDF payload")
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                return [page.extract_text() or "" for page in pdf.pages]
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(f"unreadable PDF: {e}") from e

    def extract(self, data: bytes) -> str:
        """Concatenated text of all pages, one page per line block."""
        pages = self.extract_pages(data)
        logger.debug(f"Extracted {len(pages)} PDF pages")
        return "\n".join(pages)

    async def extract_async(self, data: bytes) -> str:
        """Same as extract(), off the event loop."""
        return await asyncio.to_thread(self.extract, data)
