"""HTTP client the UI uses to reach the indexing and chat endpoints."""

import os
from collections.abc import AsyncIterator

import httpx

from ragdemo.models.schemas import IndexingResponse, StreamEvent
from ragdemo.streaming.sse import SSE_MEDIA_TYPE, decode_stream

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
CHAT_TIMEOUT = 120.0


class ApiRequestError(Exception):
    """Raised when the API rejects a request or cannot be reached."""

    pass


class IndexingRequestError(ApiRequestError):
    """Raised when an indexing request fails."""

    pass


class ChatRequestError(ApiRequestError):
    """Raised when a chat request fails before streaming starts."""

    pass


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("error") or f"HTTP {response.status_code}"
    except ValueError:
        return f"HTTP {response.status_code}"


class RagApiClient:
    """Thin async wrapper over the REST and SSE endpoints."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            transport=self._transport,
            timeout=CHAT_TIMEOUT,
        )

    async def _index(self, data: dict[str, str], files: dict | None = None) -> IndexingResponse:
        async with self._client() as client:
            try:
                response = await client.post("/api/indexing", data=data, files=files)
            except httpx.RequestError as e:
                raise IndexingRequestError(f"Connection failed: {e}") from e

        if response.status_code != 200:
            raise IndexingRequestError(_error_message(response))
        return IndexingResponse.model_validate(response.json())

    async def index_text(self, content: str) -> IndexingResponse:
        return await self._index({"type": "text", "content": content})

    async def index_file(self, filename: str, data: bytes) -> IndexingResponse:
        return await self._index({"type": "file"}, files={"file": (filename, data)})

    async def index_website(self, url: str) -> IndexingResponse:
        return await self._index({"type": "website", "url": url})

    async def stream_chat(self, query: str) -> AsyncIterator[StreamEvent]:
        """Ask a question and yield answer fragments as they arrive.

        Raises:
            ChatRequestError: If the server answers with an error status
                or cannot be reached.
        """
        async with self._client() as client:
            try:
                async with client.stream(
                    "POST",
                    "/api/chat",
                    json={"query": query},
                    headers={"Accept": SSE_MEDIA_TYPE},
                ) as response:
                    if response.status_code != 200:
                        await response.aread()
                        raise ChatRequestError(_error_message(response))
                    async for event in decode_stream(response.aiter_bytes()):
                        yield event
            except httpx.RequestError as e:
                raise ChatRequestError(f"Connection failed: {e}") from e
