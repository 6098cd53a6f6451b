"""Format-specific loaders for uploaded files.

Each loader reads a file from disk and returns its chunks in document
order. The loader is chosen by file extension only, so the same file
name always maps to the same loader. Unknown extensions are read as
plain text.
"""

import csv
import io
import json
import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import docx

from ragdemo.models.schemas import Chunk, ChunkMetadata, SourceType
from ragdemo.parsing.errors import IngestError
from ragdemo.parsing.pdf_parser import parse_pdf

logger = logging.getLogger(__name__)

FileLoader = Callable[[Path, str], list[Chunk]]


def _chunk(text: str, source_name: str, locator: str | None = None) -> Chunk:
    return Chunk(
        text=text,
        metadata=ChunkMetadata(
            source_name=source_name,
            source_type=SourceType.FILE,
            locator=locator,
        ),
    )


def _read_text(path: Path) -> str:
    # utf-8-sig drops a leading BOM written by spreadsheet exports
    return path.read_bytes().decode("utf-8-sig", errors="replace")


def load_pdf(path: Path, source_name: str) -> list[Chunk]:
    """One chunk per page that has extractable text."""
    document = parse_pdf(path.read_bytes())
    return [
        _chunk(page.text, source_name, locator=f"page {page.number}")
        for page in document.text_pages
    ]


def load_csv(path: Path, source_name: str) -> list[Chunk]:
    """One chunk per data row, rendered as ``column: value`` lines."""
    try:
        reader = csv.DictReader(io.StringIO(_read_text(path)))
        chunks = []
        for row_number, row in enumerate(reader, start=1):
            lines = [
                f"{(column or '').strip()}: {(value or '').strip()}"
                for column, value in row.items()
                if column is not None
            ]
            chunks.append(_chunk("\n".join(lines), source_name, locator=f"row {row_number}"))
        return chunks
    except csv.Error as e:
        raise IngestError(f"Invalid CSV file {source_name}: {e}") from e


def load_docx(path: Path, source_name: str) -> list[Chunk]:
    """Paragraph text of a Word document as a single chunk.

    Legacy binary ``.doc`` files are routed here as well; python-docx
    cannot open them and they fail with an IngestError.
    """
    try:
        document = docx.Document(str(path))
    except Exception as e:
        raise IngestError(f"Failed to read Word document {source_name}: {e}") from e

    text = "\n".join(p.text for p in document.paragraphs if p.text.strip())
    return [_chunk(text, source_name)]


def _iter_strings(value: object) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from _iter_strings(item)
    elif isinstance(value, list):
        for item in value:
            yield from _iter_strings(item)


def load_json(path: Path, source_name: str) -> list[Chunk]:
    """Every string value in the document, one per line, in document order."""
    try:
        data = json.loads(_read_text(path))
    except json.JSONDecodeError as e:
        raise IngestError(f"Invalid JSON file {source_name}: {e}") from e

    text = "\n".join(s for s in _iter_strings(data) if s.strip())
    return [_chunk(text, source_name)]


def load_plaintext(path: Path, source_name: str) -> list[Chunk]:
    """Whole file as one chunk, decoded as UTF-8."""
    return [_chunk(_read_text(path), source_name)]


_LOADERS: dict[str, FileLoader] = {
    ".pdf": load_pdf,
    ".csv": load_csv,
    ".docx": load_docx,
    ".doc": load_docx,
    ".json": load_json,
}


def select_parser(filename: str) -> FileLoader:
    """Pick the loader for a file name by its extension.

    Args:
        filename: Original name of the uploaded file.

    Returns:
        The matching loader, or the plain-text loader for any other extension.
    """
    return _LOADERS.get(Path(filename).suffix.lower(), load_plaintext)
