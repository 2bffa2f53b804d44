import io

import pytest
from pypdf import PdfWriter

from hootai.modules.analysis.file_extract import (
    FileExtractionError,
    extract_csv_text,
    extract_pdf_text,
    extract_text,
)


def make_text_pdf(text: str) -> bytes:
    """Single-page PDF with one line of Helvetica text."""
    content = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = b"%PDF-1.4\n"
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    out += b"".join(b"%010d 00000 n \n" % offset for offset in offsets)
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_at
    return out


def make_blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class TestCsv:
    def test_utf8_with_bom(self):
        assert extract_csv_text("\ufeffpage,visits\n".encode("utf-8")) == "page,visits\n"

    def test_latin1_fallback(self):
        assert extract_csv_text("caf\xe9,1".encode("latin-1")) == "caf\xe9,1"


class TestPdf:
    def test_text_layer(self):
        assert "Checkout drop-off" in extract_pdf_text(make_text_pdf("Checkout drop-off"))

    def test_blank_pdf_has_no_text(self):
        with pytest.raises(FileExtractionError, match="no extractable text"):
            extract_pdf_text(make_blank_pdf())

    def test_garbage_bytes(self):
        with pytest.raises(FileExtractionError, match="Could not read PDF"):
            extract_pdf_text(b"this is not a pdf")


class TestExtractText:
    def test_dispatch_by_extension(self):
        assert extract_text("DATA.CSV", b"a,b\n1,2") == "a,b\n1,2"
        assert "Bounce rate" in extract_text("report.pdf", make_text_pdf("Bounce rate"))

    @pytest.mark.parametrize("name", ["notes.txt", "image.png", "", "csv"])
    def test_unsupported_extension(self, name):
        with pytest.raises(FileExtractionError, match="Only CSV and PDF"):
            extract_text(name, b"data")

    def test_empty_upload(self):
        with pytest.raises(FileExtractionError, match="empty"):
            extract_text("data.csv", b"")
