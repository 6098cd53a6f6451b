"""Answer composer: retrieval, grounded prompt, and streamed completion.

Core module for producing grounded answers.

Pipeline for one question:

1. **Retrieval** - top-k chunks from the knowledge base, accepted as-is
   (no reranking, no score threshold, empty results allowed).

2. **Prompt assembly** - a single system message restricting the model to
   the supplied context, asking for Markdown, a trailing source reference,
   and a fixed fallback sentence. Retrieved chunks are embedded verbatim as
   JSON. Grounding is enforced by the prompt only; the output is not checked.

3. **Completion** - an Agno Agent built around the shared chat model streams
   the answer. Only content deltas are relayed.

4. **Priming** - the first delta is awaited before the stream is handed to
   the HTTP layer. Failures up to that point raise and become a plain error
   response. Failures after it are folded into the stream as one sentinel
   fragment, and the stream is closed cleanly.
"""

import json
import logging
from collections.abc import AsyncGenerator, AsyncIterator

from agno.agent import Agent
from agno.models.openai import OpenAIChat
from agno.run.agent import RunEvent

from ragdemo.agent.config import AgentConfig, get_agent_config
from ragdemo.agent.knowledge import KnowledgeService, get_knowledge_service
from ragdemo.models.schemas import Chunk, StreamEvent

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "I do not currently have the available context for this question."
STREAM_ERROR_TEXT = "Error streaming response"

_SYSTEM_PROMPT_TEMPLATE = """\
You are an AI Assistant who helps resolving user queries based on the context \
available to you from raw text, uploaded documents or given website urls, \
together with their source and position.

Only answer based on the available context.
Format output in **Markdown** (use lists, bold/italics, and code blocks when relevant).
At the end always add a reference to the source(s) of the answer.
For source references do not give an entire file path: give the file name for \
files and the link for websites.
If the context does not contain the answer, say "{fallback}"

CONTEXT: {context}
"""


class CompletionError(Exception):
    """Raised when the chat model fails before producing any text."""

    pass


def serialize_chunks(chunks: list[Chunk]) -> str:
    """Render retrieved chunks (text and metadata) as a JSON array."""
    return json.dumps(
        [chunk.model_dump(mode="json", exclude_none=True) for chunk in chunks],
        ensure_ascii=False,
    )


def build_system_prompt(chunks: list[Chunk]) -> str:
    """Build the grounded system instruction for a set of retrieved chunks.

    Args:
        chunks: Retrieved chunks, most relevant first. May be empty.

    Returns:
        The system message text with the chunks embedded verbatim.
    """
    return _SYSTEM_PROMPT_TEMPLATE.format(
        fallback=FALLBACK_ANSWER,
        context=serialize_chunks(chunks),
    )


class AnswerComposer:
    """Produces grounded, streamed answers.

    Holds the chat model for the lifetime of the process; a lightweight
    Agent is created per question because the system message carries
    that question's retrieved context.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        knowledge: KnowledgeService | None = None,
    ) -> None:
        """Initialize the composer.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
            knowledge: Knowledge service to retrieve from.
                       Uses the global service if not provided.
        """
        self._config = config or get_agent_config()
        self._knowledge = knowledge or get_knowledge_service()
        self._model = self._create_model()

    def _create_model(self) -> OpenAIChat:
        return OpenAIChat(
            id=self._config.model_name,
            api_key=self._config.api_key,
            base_url=self._config.base_url,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

    async def _stream_completion(
        self,
        system_prompt: str,
        query: str,
    ) -> AsyncGenerator[str]:
        """Stream content deltas for a system prompt and question.

        Yields:
            Non-empty text deltas as the model produces them.

        Raises:
            CompletionError: If the model reports a run error.
        """
        agent = Agent(model=self._model, system_message=system_prompt)

        async for event in agent.arun(query, stream=True):
            kind = getattr(event, "event", None)
            if kind == RunEvent.run_error:
                raise CompletionError(str(getattr(event, "content", "") or "Model run failed"))
            if kind == RunEvent.run_content and event.content:
                yield event.content

    async def answer(self, query: str) -> AsyncIterator[StreamEvent]:
        """Start answering a question.

        Retrieval, prompt assembly and the first completion delta happen
        before this returns, so any failure in them raises here.

        Args:
            query: The user's question.

        Returns:
            Stream of answer fragments in generation order.

        Raises:
            RetrievalError: If the knowledge base cannot be searched.
            CompletionError: If the model fails before its first delta.
        """
        chunks = await self._knowledge.retrieve_top_k(query)
        logger.info(f"Retrieved {len(chunks)} chunks for query")

        deltas = self._stream_completion(build_system_prompt(chunks), query)
        try:
            first = await anext(deltas)
        except StopAsyncIteration:
            first = None
        except CompletionError:
            await deltas.aclose()
            raise
        except Exception as e:
            await deltas.aclose()
            raise CompletionError(str(e) or e.__class__.__name__) from e

        return self._relay(first, deltas)

    async def _relay(
        self,
        first: str | None,
        deltas: AsyncGenerator[str],
    ) -> AsyncGenerator[StreamEvent]:
        """Re-emit deltas as events, ending with a sentinel on failure."""
        try:
            if first is not None:
                yield StreamEvent(text=first)
            async for delta in deltas:
                yield StreamEvent(text=delta)
        except Exception:
            logger.exception("Completion failed mid-stream")
            yield StreamEvent(text=STREAM_ERROR_TEXT, error=True)
        finally:
            await deltas.aclose()


# Module-level singleton instance
_answer_composer: AnswerComposer | None = None


def get_answer_composer() -> AnswerComposer:
    """Get or create the global answer composer.

    Returns:
        The AnswerComposer instance.
    """
    global _answer_composer
    if _answer_composer is None:
        _answer_composer = AnswerComposer()
    return _answer_composer
