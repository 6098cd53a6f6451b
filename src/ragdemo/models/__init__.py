"""Pydantic models for API requests, responses and indexed content.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - Chunk / ChunkMetadata: Indexed text with provenance
    - ChatRequest: Incoming chat question
    - StreamEvent: One streamed answer fragment
    - IndexingResponse: Outcome of an indexing request
    - ErrorResponse: Body of every non-streamed failure
"""

from ragdemo.models.schemas import (
    ChatRequest,
    Chunk,
    ChunkMetadata,
    ErrorResponse,
    IndexingResponse,
    SourceType,
    StreamEvent,
)

__all__ = [
    "ChatRequest",
    "Chunk",
    "ChunkMetadata",
    "ErrorResponse",
    "IndexingResponse",
    "SourceType",
    "StreamEvent",
]
