from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceType(str, Enum):
    """Kind of content a chunk or data source came from."""

    TEXT = "text"
    FILE = "file"
    WEBSITE = "website"


class ChunkMetadata(BaseModel):
    """Provenance of a chunk, used by the model for source citations.

    Attributes:
        source_name: File name, URL, or label of the submitted text.
        source_type: Kind of submission the chunk came from.
        locator: Position inside the source (page, row, URL), if any.
    """

    model_config = ConfigDict(frozen=True)

    source_name: str
    source_type: SourceType
    locator: str | None = None


class Chunk(BaseModel):
    """A unit of source text plus its provenance."""

    model_config = ConfigDict(frozen=True)

    text: str
    metadata: ChunkMetadata


class ChatRequest(BaseModel):
    """Request payload for the chat endpoint.

    Attributes:
        query: The user's question.
    """

    query: str = Field(..., min_length=1)

    @field_validator("query", mode="before")
    @classmethod
    def strip_query(cls, v: str) -> str:
        """Strip whitespace from query before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class StreamEvent(BaseModel):
    """One streamed fragment of the assistant's answer.

    Attributes:
        text: The text fragment. Concatenating fragments in arrival
            order yields the full answer.
        error: Set only on the error sentinel fragment.
    """

    text: str
    error: bool | None = None


class IndexingResponse(BaseModel):
    """Response after a text, file or website was indexed.

    Attributes:
        message: Human readable outcome.
        pages: Number of chunks written to the knowledge base.
    """

    message: str
    pages: int = Field(ge=0)


class ErrorResponse(BaseModel):
    """Body returned for every non-streamed failure."""

    error: str
