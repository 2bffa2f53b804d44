import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".pdf")


class FileExtractionError(ValueError):
    pass


def extract_csv_text(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def extract_pdf_text(data: bytes) -> str:
    """Concatenate the text layer of every page"""
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError) as e:
        raise FileExtractionError(f"Could not read PDF: {e}") from e
    text = "\n".join(p.strip() for p in pages if p.strip())
    if not text:
        raise FileExtractionError("PDF has no extractable text")
    return text


def extract_text(file_name: str, data: bytes) -> str:
    name = (file_name or "").lower()
    if not name.endswith(SUPPORTED_EXTENSIONS):
        raise FileExtractionError("Only CSV and PDF files are supported")
    if not data:
        raise FileExtractionError("Uploaded file is empty")
    if name.endswith(".pdf"):
        text = extract_pdf_text(data)
    else:
        text = extract_csv_text(data)
    logger.info(f"Extracted {len(text)} characters from {name.rsplit('.', 1)[-1]} upload")
    return text
