"""PDF text extraction with pypdf.

Uploads are checked for size and header before pypdf sees them, and each
page is extracted on its own so a single unreadable page does not sink
the whole document.
"""

import io
import logging

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ragdemo.parsing.errors import IngestError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 20 * 1024 * 1024  # 20MB
PDF_MAGIC_BYTES = b"%PDF"


class PDFParseError(IngestError):
    """Raised when a PDF cannot be opened or read."""

    pass


class PDFPage(BaseModel):
    """Text of one page; ``number`` is 1-based."""

    number: int = Field(ge=1)
    text: str = ""


class PDFDocument(BaseModel):
    """Pages of a parsed PDF in document order, including blank ones."""

    pages: list[PDFPage]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def text_pages(self) -> list[PDFPage]:
        """Pages that yielded any text."""
        return [p for p in self.pages if p.text]


def _check_upload(data: bytes) -> None:
    if not data:
        raise PDFParseError("Empty file provided")

    if len(data) > MAX_FILE_SIZE:
        size_mb = len(data) / (1024 * 1024)
        raise PDFParseError(f"File size ({size_mb:.1f}MB) exceeds maximum allowed (20MB)")

    if not data.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise PDFParseError("Invalid PDF: file does not start with PDF header")


def _open(data: bytes) -> PdfReader:
    try:
        reader = PdfReader(io.BytesIO(data))
        count = len(reader.pages)
    except PdfReadError as e:
        raise PDFParseError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise PDFParseError(f"Failed to read PDF: {e}") from e

    if count == 0:
        raise PDFParseError("PDF contains no pages")
    return reader


def parse_pdf(data: bytes) -> PDFDocument:
    """Extract the text of every page of a PDF.

    Args:
        data: Raw bytes of the uploaded file.

    Returns:
        PDFDocument with one entry per page. Pages whose text cannot be
        extracted are kept with empty text.

    Raises:
        PDFParseError: If the file is empty, too large, not a PDF, or corrupt.
    """
    _check_upload(data)
    reader = _open(data)

    pages: list[PDFPage] = []
    for number, page in enumerate(reader.pages, start=1):
        try:
            text = (page.extract_text() or "").strip()
        except Exception as e:
            logger.warning(f"Failed to extract text from page {number}: {e}")
            text = ""
        pages.append(PDFPage(number=number, text=text))

    document = PDFDocument(pages=pages)
    if not document.text_pages:
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")
    return document
