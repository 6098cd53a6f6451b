"""Client-side session state: data sources, chat log, and the live answer.

The controller owns everything the page renders and is free of UI code,
so its behaviour can be exercised without a browser or a server.
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field

from ragdemo.models.schemas import IndexingResponse, SourceType
from ragdemo.ui.api_client import ApiRequestError, RagApiClient

logger = logging.getLogger(__name__)

NO_RESPONSE_TEXT = "No response found."


class SourceStatus(str, Enum):
    """Ingestion status of a data source."""

    UPLOADING = "uploading"
    INDEXING = "indexing"
    INDEXED = "indexed"
    PROCESSING = "processing"
    ERROR = "error"


class DataSource(BaseModel):
    """A submitted text, file or website as shown in the sources list."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: SourceType
    display_name: str
    status: SourceStatus


class ChatMessage(BaseModel):
    """A single logged chat message."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)


class SessionController:
    """State machine behind the chat page.

    - Sources are added optimistically, then marked indexed or error.
    - Removing a source cancels its in-flight indexing call; results for
      removed sources are never applied.
    - One chat exchange at a time, and only once a source exists.
    - No retries: failures are terminal until the user resubmits.
    """

    def __init__(
        self,
        client: RagApiClient | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._client = client or RagApiClient()
        self._on_change = on_change
        self._pending: dict[str, asyncio.Task] = {}
        self.sources: list[DataSource] = []
        self.messages: list[ChatMessage] = []
        self.partial_answer = ""
        self.is_streaming = False
        self.last_error: str | None = None
        self._text_count = 0

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def get_source(self, source_id: str) -> DataSource | None:
        return next((s for s in self.sources if s.id == source_id), None)

    @property
    def can_chat(self) -> bool:
        """Whether a question may be sent right now."""
        return bool(self.sources) and not self.is_streaming

    async def _ingest(
        self,
        source: DataSource,
        request: Awaitable[IndexingResponse],
    ) -> DataSource:
        self.sources.append(source)
        self._notify()

        task = asyncio.ensure_future(request)
        self._pending[source.id] = task
        try:
            result = await task
        except asyncio.CancelledError:
            if self.get_source(source.id) is None:
                logger.info(f"Indexing of removed source {source.display_name} cancelled")
                return source
            raise
        except ApiRequestError as e:
            if self.get_source(source.id) is not None:
                logger.warning(f"Indexing {source.display_name} failed: {e}")
                source.status = SourceStatus.ERROR
                self._notify()
            return source
        finally:
            self._pending.pop(source.id, None)

        if self.get_source(source.id) is not None:
            logger.info(f"Indexed {source.display_name} ({result.pages} chunks)")
            source.status = SourceStatus.INDEXED
            self._notify()
        return source

    async def submit_text(self, content: str) -> DataSource | None:
        if not content.strip():
            return None
        self._text_count += 1
        source = DataSource(
            type=SourceType.TEXT,
            display_name=f"Text {self._text_count}",
            status=SourceStatus.INDEXING,
        )
        return await self._ingest(source, self._client.index_text(content))

    async def submit_file(self, filename: str, data: bytes) -> DataSource | None:
        if not filename:
            return None
        source = DataSource(
            type=SourceType.FILE,
            display_name=filename,
            status=SourceStatus.UPLOADING,
        )
        return await self._ingest(source, self._client.index_file(filename, data))

    async def submit_website(self, url: str) -> DataSource | None:
        url = url.strip()
        if not url:
            return None
        source = DataSource(
            type=SourceType.WEBSITE,
            display_name=urlparse(url).hostname or url,
            status=SourceStatus.INDEXING,
        )
        return await self._ingest(source, self._client.index_website(url))

    def remove_source(self, source_id: str) -> bool:
        """Remove a source whatever its status, cancelling pending indexing."""
        source = self.get_source(source_id)
        if source is None:
            return False

        self.sources.remove(source)
        task = self._pending.pop(source_id, None)
        if task is not None and not task.done():
            task.cancel()
        self._notify()
        return True

    async def send_chat(self, query: str) -> ChatMessage | None:
        """Send a question and stream its answer into the log.

        Returns:
            The logged assistant message, or None if the question was
            rejected (blank, no sources, or another answer in flight).
        """
        query = query.strip()
        if not query or not self.can_chat:
            return None

        self.is_streaming = True
        self.last_error = None
        self.partial_answer = ""
        self.messages.append(ChatMessage(role="user", content=query))
        self._notify()

        try:
            async for event in self._client.stream_chat(query):
                self.partial_answer += event.text
                if event.error:
                    self.last_error = event.text
                self._notify()
            content = self.partial_answer or NO_RESPONSE_TEXT
        except ApiRequestError as e:
            logger.warning(f"Chat request failed: {e}")
            self.last_error = str(e)
            # fragments already shown are kept
            if self.partial_answer:
                content = f"{self.partial_answer}\n\nError: {e}"
            else:
                content = f"Error: {e}"
        finally:
            self.is_streaming = False
            self.partial_answer = ""

        reply = ChatMessage(role="assistant", content=content)
        self.messages.append(reply)
        self._notify()
        return reply

    def clear_chat(self) -> None:
        if self.is_streaming:
            return
        self.messages.clear()
        self._notify()
