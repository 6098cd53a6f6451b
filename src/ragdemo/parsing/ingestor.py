"""Turn text, file and website submissions into chunks.

Uploaded files are written to a temporary file named after a fresh
UUID (never the upload's own name, so concurrent uploads of the same
file cannot collide), parsed, and the temporary file is always removed.
"""

import logging
import tempfile
import uuid
from pathlib import Path

from ragdemo.models.schemas import Chunk, ChunkMetadata, SourceType
from ragdemo.parsing.errors import EmptyContentError
from ragdemo.parsing.file_loaders import select_parser
from ragdemo.parsing.web_loader import load_website as _fetch_website

logger = logging.getLogger(__name__)

TEXT_SOURCE_NAME = "Raw text"


def _non_empty(chunks: list[Chunk], source_name: str) -> list[Chunk]:
    kept = [c for c in chunks if c.text.strip()]
    if not kept:
        raise EmptyContentError(f"No text could be extracted from {source_name}")
    return kept


def temp_path_for(filename: str) -> Path:
    """Unique temporary location for an upload, keeping only its extension."""
    return Path(tempfile.gettempdir()) / f"ragdemo-{uuid.uuid4().hex}{Path(filename).suffix.lower()}"


def load_text(content: str) -> list[Chunk]:
    """Wrap raw submitted text as a single chunk."""
    chunk = Chunk(
        text=content,
        metadata=ChunkMetadata(source_name=TEXT_SOURCE_NAME, source_type=SourceType.TEXT),
    )
    return _non_empty([chunk], TEXT_SOURCE_NAME)


def load_file(filename: str, data: bytes) -> list[Chunk]:
    """Parse an uploaded file into chunks.

    Args:
        filename: Original file name; its extension picks the parser and its
            base name is recorded as the chunk source.
        data: Raw file bytes.

    Returns:
        Non-empty chunks in document order.

    Raises:
        IngestError: If the file cannot be parsed or holds no text.
    """
    source_name = Path(filename).name
    parser = select_parser(source_name)
    path = temp_path_for(source_name)

    path.write_bytes(data)
    try:
        chunks = parser(path, source_name)
    finally:
        path.unlink(missing_ok=True)

    logger.debug(f"Parsed {source_name} with {parser.__name__}: {len(chunks)} chunks")
    return _non_empty(chunks, source_name)


async def load_website(url: str) -> list[Chunk]:
    """Fetch a website and return its non-empty chunks."""
    chunks = await _fetch_website(url)
    return _non_empty(chunks, url)
