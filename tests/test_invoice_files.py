"""Tests for local invoice PDF storage."""
import pytest

from src.store.invoice_files import invoice_pdf_path, write_invoice_pdf


def test_invoice_pdf_path_keeps_plain_ids(tmp_path):
    """Test ordinary ids are used as is."""
    assert invoice_pdf_path("2024-03_abc", tmp_path) == tmp_path / "invoice_2024-03_abc.pdf"


def test_invoice_pdf_path_stays_in_dest_dir(tmp_path):
    """Test ids carrying path separators cannot leave the destination directory."""
    for invoice_id in ("a/../../b", "../../escaped", "..", "x\\y"):
        path = invoice_pdf_path(invoice_id, tmp_path)
        assert path.parent == tmp_path
        assert "/" not in path.name
        assert "\\" not in path.name


@pytest.mark.asyncio
async def test_write_invoice_pdf_with_path_like_id(tmp_path):
    """Test an id with path separators is written inside the destination directory."""
    dest = tmp_path / "inv"

    path, is_suspect = await write_invoice_pdf("../../escaped", b"%PDF-1.4", dest)

    assert path.parent == dest
    assert path.read_bytes() == b"%PDF-1.4"
    assert is_suspect is False
    assert list(tmp_path.iterdir()) == [dest]
