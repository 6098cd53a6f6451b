"""In-memory stand-ins for the knowledge base and the chat model."""

from collections.abc import AsyncGenerator

from ragdemo.agent.composer import AnswerComposer
from ragdemo.agent.config import AgentConfig
from ragdemo.models.schemas import Chunk, ChunkMetadata, SourceType


def make_chunk(
    text: str,
    source_name: str = "notes.txt",
    source_type: SourceType = SourceType.FILE,
    locator: str | None = None,
) -> Chunk:
    return Chunk(
        text=text,
        metadata=ChunkMetadata(source_name=source_name, source_type=source_type, locator=locator),
    )


class FakeKnowledge:
    """Stores indexed chunks in a list and returns the first k on search."""

    def __init__(
        self,
        chunks: list[Chunk] | None = None,
        index_error: Exception | None = None,
        search_error: Exception | None = None,
    ) -> None:
        self.chunks: list[Chunk] = list(chunks or [])
        self.queries: list[str] = []
        self._index_error = index_error
        self._search_error = search_error

    async def index(self, chunks: list[Chunk]) -> int:
        if self._index_error is not None:
            raise self._index_error
        self.chunks.extend(chunks)
        return len(chunks)

    async def retrieve_top_k(self, query: str, k: int | None = None) -> list[Chunk]:
        self.queries.append(query)
        if self._search_error is not None:
            raise self._search_error
        return self.chunks[: k or 4]


class ScriptedComposer(AnswerComposer):
    """AnswerComposer whose model replays a script.

    Script items are yielded when they are strings and raised when they
    are exceptions. A callable script receives the system prompt and
    returns the items to replay.
    """

    def __init__(self, knowledge: FakeKnowledge, script=()) -> None:
        self.prompts: list[str] = []
        self.queries: list[str] = []
        self.closed = False
        self._script = script
        super().__init__(config=AgentConfig(api_key="sk-test"), knowledge=knowledge)

    def _create_model(self) -> None:
        return None

    async def _stream_completion(self, system_prompt: str, query: str) -> AsyncGenerator[str]:
        self.prompts.append(system_prompt)
        self.queries.append(query)
        items = self._script(system_prompt) if callable(self._script) else self._script
        try:
            for item in items:
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            self.closed = True


def grounded_script(system_prompt: str) -> list[str]:
    """Answer from context when it mentions the sky, otherwise fall back."""
    if "The sky is blue." in system_prompt:
        return ["The sky is ", "**blue**.", "\n\n", "Source: Raw text"]
    return ["I do not currently have the available context for this question."]
