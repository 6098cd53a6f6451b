"""Document ingestion for the knowledge base.

Transforms raw text, uploaded files and web pages into chunks that carry
their source name for citations.

Responsibilities:
    - Extension based parser dispatch (.pdf, .csv, .docx, .doc, .json, text)
    - PDF text extraction with pypdf, Word documents with python-docx
    - Website fetching with httpx and HTML cleanup with BeautifulSoup
    - Temporary file handling for uploads
"""

from ragdemo.parsing.errors import EmptyContentError, IngestError, WebsiteFetchError
from ragdemo.parsing.file_loaders import select_parser
from ragdemo.parsing.ingestor import load_file, load_text, load_website
from ragdemo.parsing.pdf_parser import PDFDocument, PDFParseError, parse_pdf

__all__ = [
    "EmptyContentError",
    "IngestError",
    "PDFDocument",
    "PDFParseError",
    "WebsiteFetchError",
    "load_file",
    "load_text",
    "load_website",
    "parse_pdf",
    "select_parser",
]
