"""Local storage of downloaded invoice PDFs."""
import logging
import re
from pathlib import Path

import aiofiles

from src.config import INVOICES_DIR
from src.parse.pdf_text import is_pdf_bytes

logger = logging.getLogger(__name__)


UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.-]")


def invoice_pdf_path(invoice_id: str, dest_dir: Path = INVOICES_DIR) -> Path:
    # ids come from upstream, keep them inside dest_dir
    safe_id = UNSAFE_FILENAME_CHARS.sub("_", invoice_id).strip(".") or "unknown"
    return dest_dir / f"invoice_{safe_id}.pdf"


async def write_invoice_pdf(invoice_id: str, content: bytes, dest_dir: Path = INVOICES_DIR) -> tuple[Path, bool]:
    """
    Write the downloaded bytes as-is.

    Returns (path, is_suspect). Bytes without the %PDF signature are still
    written so they can be inspected; the caller gets is_suspect=True.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    path = invoice_pdf_path(invoice_id, dest_dir)
    is_suspect = not is_pdf_bytes(content)
    if is_suspect:
        logger.warning(f"[INVOICES] invoice {invoice_id} is not a PDF (first bytes {content[:4]!r}), writing anyway")

    async with aiofiles.open(path, "wb") as f:
        await f.write(content)

    logger.info(f"[INVOICES] invoice {invoice_id} saved to {path} ({len(content)} bytes)")
    return path, is_suspect
