"""Indexing endpoint for text, file and website submissions.

Handles form validation, parsing into chunks, and knowledge base storage.
"""

import logging

from fastapi import APIRouter, File, Form, UploadFile, status

from ragdemo.agent.knowledge import VectorStoreError, get_knowledge_service
from ragdemo.api.errors import APIError
from ragdemo.models.schemas import Chunk, ErrorResponse, IndexingResponse, SourceType
from ragdemo.parsing import IngestError, load_file, load_text, load_website
from ragdemo.parsing.pdf_parser import MAX_FILE_SIZE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["indexing"])

# 20MB limit matches pdf_parser constant
MAX_UPLOAD_SIZE = MAX_FILE_SIZE

# Same message for every source type; clients only rely on the status code
INDEXED_MESSAGE = "File indexed successfully"


def _parse_source_type(value: str | None) -> SourceType:
    """Validate the submitted ``type`` field.

    Raises:
        APIError: 400 if the field is missing or unknown.
    """
    if not value:
        raise APIError(status.HTTP_400_BAD_REQUEST, "No type provided")
    try:
        return SourceType(value.strip().lower())
    except ValueError:
        raise APIError(
            status.HTTP_400_BAD_REQUEST,
            f"Unsupported type '{value}'. Use one of: text, file, website",
        ) from None


async def _read_and_validate_size(file: UploadFile) -> bytes:
    """Read file content and validate size.

    Raises:
        APIError: 413 if file exceeds size limit.
    """
    content = await file.read()

    if len(content) > MAX_UPLOAD_SIZE:
        size_mb = len(content) / (1024 * 1024)
        raise APIError(
            status.HTTP_413_CONTENT_TOO_LARGE,
            f"File size ({size_mb:.1f}MB) exceeds maximum allowed (20MB)",
        )

    return content


async def _chunks_for_text(content: str | None) -> list[Chunk]:
    if content is None or not content.strip():
        raise APIError(status.HTTP_400_BAD_REQUEST, "No content provided")
    return load_text(content)


async def _chunks_for_file(file: UploadFile | None) -> list[Chunk]:
    if file is None or not file.filename:
        raise APIError(status.HTTP_400_BAD_REQUEST, "No file uploaded")

    data = await _read_and_validate_size(file)
    return load_file(file.filename, data)


async def _chunks_for_website(url: str | None) -> list[Chunk]:
    if url is None or not url.strip():
        raise APIError(status.HTTP_400_BAD_REQUEST, "No URL provided")
    try:
        return await load_website(url)
    except ValueError as e:
        raise APIError(status.HTTP_400_BAD_REQUEST, str(e)) from e


@router.post(
    "/indexing",
    response_model=IndexingResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def index_source(
    source_type: str | None = Form(None, alias="type"),
    content: str | None = Form(None),
    url: str | None = Form(None),
    file: UploadFile | None = File(None),
) -> IndexingResponse:
    """Parse a submission and store its chunks in the knowledge base.

    Form fields: ``type`` (text, file or website) plus ``content``,
    ``file`` or ``url`` respectively.

    Returns:
        IndexingResponse with the number of chunks indexed as ``pages``.

    Raises:
        400: Missing or invalid field.
        413: File exceeds 20MB limit.
        500: Parsing, fetching or storage failure.
    """
    kind = _parse_source_type(source_type)

    try:
        if kind is SourceType.TEXT:
            chunks = await _chunks_for_text(content)
        elif kind is SourceType.FILE:
            chunks = await _chunks_for_file(file)
        else:
            chunks = await _chunks_for_website(url)
    except IngestError as e:
        logger.warning(f"Failed to ingest {kind.value} submission: {e}")
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e)) from e

    try:
        pages = await get_knowledge_service().index(chunks)
    except VectorStoreError as e:
        logger.error(f"Failed to store {kind.value} submission in knowledge base: {e}")
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e)) from e
    except Exception as e:
        logger.exception("Knowledge base unavailable")
        raise APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e) or "Failed to store document in knowledge base",
        ) from e

    source_name = chunks[0].metadata.source_name
    logger.info(f"Successfully indexed {kind.value} {source_name} ({pages} chunks)")

    return IndexingResponse(
        message=INDEXED_MESSAGE,
        pages=pages,
    )
