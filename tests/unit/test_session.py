"""Unit tests for the client session controller.

The API client is replaced with a scripted fake, so no request ever
leaves the process.
"""

import asyncio

import pytest
import pytest_check as check

from ragdemo.models.schemas import IndexingResponse, SourceType, StreamEvent
from ragdemo.ui.api_client import ChatRequestError, IndexingRequestError
from ragdemo.ui.session import NO_RESPONSE_TEXT, SessionController, SourceStatus


class FakeApiClient:
    """Records calls; indexing can be held open, chat replays a script."""

    def __init__(self) -> None:
        self.index_calls: list[tuple[str, str]] = []
        self.chat_calls: list[str] = []
        self.index_error: Exception | None = None
        self.index_gate: asyncio.Event | None = None
        self.index_cancelled = False
        self.chat_script: list = []
        self.chat_gate: asyncio.Event | None = None

    async def _index(self, kind: str, value: str) -> IndexingResponse:
        self.index_calls.append((kind, value))
        try:
            if self.index_gate is not None:
                await self.index_gate.wait()
        except asyncio.CancelledError:
            self.index_cancelled = True
            raise
        if self.index_error is not None:
            raise self.index_error
        return IndexingResponse(message="indexed", pages=1)

    async def index_text(self, content: str) -> IndexingResponse:
        return await self._index("text", content)

    async def index_file(self, filename: str, data: bytes) -> IndexingResponse:
        return await self._index("file", filename)

    async def index_website(self, url: str) -> IndexingResponse:
        return await self._index("website", url)

    async def stream_chat(self, query: str):
        self.chat_calls.append(query)
        if self.chat_gate is not None:
            await self.chat_gate.wait()
        for item in self.chat_script:
            if isinstance(item, Exception):
                raise item
            yield item


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def client() -> FakeApiClient:
    return FakeApiClient()


@pytest.fixture
def session(client: FakeApiClient) -> SessionController:
    return SessionController(client=client)


class TestIngestion:
    async def test_text_source_is_indexed(self, session, client) -> None:
        source = await session.submit_text("The sky is blue.")

        check.equal(source.status, SourceStatus.INDEXED)
        check.equal(source.type, SourceType.TEXT)
        check.equal(source.display_name, "Text 1")
        check.equal(client.index_calls, [("text", "The sky is blue.")])

    async def test_website_named_by_host(self, session) -> None:
        source = await session.submit_website("https://docs.example.com/guide")

        assert source.display_name == "docs.example.com"
        assert source.status is SourceStatus.INDEXED

    async def test_blank_input_is_ignored(self, session, client) -> None:
        assert await session.submit_text("   ") is None
        assert await session.submit_website("") is None
        assert await session.submit_file("", b"") is None
        assert session.sources == []
        assert client.index_calls == []

    async def test_source_is_pending_until_call_resolves(self, session, client) -> None:
        client.index_gate = asyncio.Event()

        task = asyncio.create_task(session.submit_file("report.pdf", b"%PDF"))
        await _settle()

        assert [s.status for s in session.sources] == [SourceStatus.UPLOADING]

        client.index_gate.set()
        source = await task
        assert source.status is SourceStatus.INDEXED

    async def test_failed_indexing_marks_error(self, session, client) -> None:
        client.index_error = IndexingRequestError("Failed to load website")

        source = await session.submit_website("https://unreachable.example")

        assert source.status is SourceStatus.ERROR
        assert session.sources == [source]
        assert len(client.index_calls) == 1

    async def test_on_change_called_for_each_transition(self, client) -> None:
        changes: list[list[SourceStatus]] = []
        session = SessionController(client=client)
        session._on_change = lambda: changes.append([s.status for s in session.sources])

        await session.submit_text("hello")

        assert changes == [[SourceStatus.INDEXING], [SourceStatus.INDEXED]]


class TestRemoveSource:
    @pytest.mark.parametrize("status", list(SourceStatus))
    async def test_removes_regardless_of_status(self, session, status) -> None:
        source = await session.submit_text("hello")
        source.status = status

        assert session.remove_source(source.id) is True
        assert session.sources == []

    async def test_text_names_not_reused_after_removal(self, session) -> None:
        first = await session.submit_text("one")
        await session.submit_text("two")
        session.remove_source(first.id)

        third = await session.submit_text("three")

        assert [s.display_name for s in session.sources] == ["Text 2", "Text 3"]
        assert third.display_name == "Text 3"

    async def test_unknown_id(self, session) -> None:
        assert session.remove_source("missing") is False

    async def test_removal_cancels_in_flight_indexing(self, session, client) -> None:
        client.index_gate = asyncio.Event()

        task = asyncio.create_task(session.submit_file("report.pdf", b"%PDF"))
        await _settle()
        source_id = session.sources[0].id

        session.remove_source(source_id)
        source = await task

        assert session.sources == []
        assert client.index_cancelled
        assert source.status is SourceStatus.UPLOADING

    async def test_late_failure_for_removed_source_is_not_applied(self, session, client) -> None:
        client.index_error = IndexingRequestError("boom")
        client.index_gate = asyncio.Event()
        notified: list[int] = []
        session._on_change = lambda: notified.append(len(session.sources))

        task = asyncio.create_task(session.submit_text("hello"))
        await _settle()
        session._pending.clear()
        session.remove_source(session.sources[0].id)
        client.index_gate.set()
        source = await task

        assert source.status is SourceStatus.INDEXING
        assert notified == [1, 0]


class TestChat:
    async def test_chat_disabled_without_sources(self, session, client) -> None:
        assert session.can_chat is False

        assert await session.send_chat("What color is the sky?") is None
        assert client.chat_calls == []
        assert session.messages == []

    async def test_answer_is_concatenation_of_fragments(self, session, client) -> None:
        await session.submit_text("The sky is blue.")
        client.chat_script = [
            StreamEvent(text="The sky "),
            StreamEvent(text="is **blue**."),
            StreamEvent(text="\n\nSource: Raw text"),
        ]

        reply = await session.send_chat("  What color is the sky?  ")

        assert reply.content == "The sky is **blue**.\n\nSource: Raw text"
        assert [m.role for m in session.messages] == ["user", "assistant"]
        assert session.messages[0].content == "What color is the sky?"
        assert session.partial_answer == ""
        assert session.is_streaming is False
        assert session.last_error is None

    async def test_partial_answer_tracks_stream(self, session, client) -> None:
        await session.submit_text("hello")
        client.chat_script = [StreamEvent(text="a"), StreamEvent(text="b")]
        seen: list[str] = []
        session._on_change = lambda: seen.append(session.partial_answer)

        await session.send_chat("q")

        assert seen == ["", "a", "ab", ""]

    async def test_second_question_rejected_while_streaming(self, session, client) -> None:
        await session.submit_text("hello")
        client.chat_gate = asyncio.Event()
        client.chat_script = [StreamEvent(text="done")]

        first = asyncio.create_task(session.send_chat("first"))
        await _settle()

        assert session.can_chat is False
        assert await session.send_chat("second") is None

        client.chat_gate.set()
        reply = await first

        assert reply.content == "done"
        assert client.chat_calls == ["first"]
        assert session.can_chat is True

    async def test_mid_stream_failure_keeps_fragments_and_sentinel(self, session, client) -> None:
        await session.submit_text("hello")
        client.chat_script = [
            StreamEvent(text="Partial "),
            StreamEvent(text="answer"),
            StreamEvent(text="Error streaming response", error=True),
        ]

        reply = await session.send_chat("q")

        assert reply.content == "Partial answerError streaming response"
        assert session.last_error == "Error streaming response"
        assert session.is_streaming is False

    async def test_request_failure_is_logged_as_error_message(self, session, client) -> None:
        await session.submit_text("hello")
        client.chat_script = [ChatRequestError("vector store unreachable")]

        reply = await session.send_chat("q")

        assert reply.content == "Error: vector store unreachable"
        assert session.last_error == "vector store unreachable"
        assert session.can_chat is True

    async def test_connection_lost_mid_answer_keeps_received_fragments(self, session, client) -> None:
        await session.submit_text("The sky is blue.")
        client.chat_script = [
            StreamEvent(text="The sky "),
            StreamEvent(text="is blue."),
            ChatRequestError("Connection failed: peer closed connection"),
        ]

        reply = await session.send_chat("What color is the sky?")

        check.is_true(reply.content.startswith("The sky is blue."))
        check.equal(
            reply.content,
            "The sky is blue.\n\nError: Connection failed: peer closed connection",
        )
        check.equal(session.last_error, "Connection failed: peer closed connection")
        check.equal(session.partial_answer, "")
        check.is_false(session.is_streaming)

    async def test_empty_stream_uses_placeholder(self, session, client) -> None:
        await session.submit_text("hello")

        reply = await session.send_chat("q")

        assert reply.content == NO_RESPONSE_TEXT

    async def test_clear_chat(self, session, client) -> None:
        await session.submit_text("hello")
        client.chat_script = [StreamEvent(text="x")]
        await session.send_chat("q")

        session.clear_chat()

        assert session.messages == []
