"""Knowledge base service: chunk indexing and top-k retrieval.

Wraps Agno's Knowledge over a LanceDB table. The connection is a
process-wide resource: it is opened lazily on first use and dropped
whenever a call fails, so the next call reconnects instead of reusing a
broken handle.
"""

import logging
from pathlib import Path

from agno.knowledge.document import Document
from agno.knowledge.embedder.openai import OpenAIEmbedder
from agno.knowledge.knowledge import Knowledge
from agno.vectordb.lancedb import LanceDb

from ragdemo.agent.config import AgentConfig, get_agent_config
from ragdemo.models.schemas import Chunk, ChunkMetadata, SourceType

logger = logging.getLogger(__name__)


class VectorStoreError(Exception):
    """Raised when chunks cannot be embedded or written."""

    pass


class RetrievalError(Exception):
    """Raised when the knowledge base cannot be searched."""

    pass


def _chunk_metadata(chunk: Chunk) -> dict[str, str]:
    metadata = {
        "source_name": chunk.metadata.source_name,
        "source_type": chunk.metadata.source_type.value,
    }
    if chunk.metadata.locator is not None:
        metadata["locator"] = chunk.metadata.locator
    return metadata


def document_to_chunk(document: Document) -> Chunk:
    """Convert a retrieved Agno document back into a chunk."""
    meta = document.meta_data or {}
    try:
        source_type = SourceType(meta.get("source_type", SourceType.TEXT.value))
    except ValueError:
        source_type = SourceType.TEXT

    return Chunk(
        text=document.content,
        metadata=ChunkMetadata(
            source_name=meta.get("source_name") or document.name or "unknown",
            source_type=source_type,
            locator=meta.get("locator"),
        ),
    )


class KnowledgeService:
    """Long-lived access to the vector store.

    Provides:
    - index(): embed and store chunks
    - retrieve_top_k(): nearest-neighbour search, most relevant first
    - Lazy connection with reconnect after failures
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        """Initialize the service without connecting.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_agent_config()
        self._knowledge: Knowledge | None = None

    def _connect(self) -> Knowledge:
        """Create the LanceDB-backed knowledge base.

        Returns:
            Configured Knowledge instance.
        """
        uri = self._config.vector_db_uri
        if "://" not in uri:
            Path(uri).mkdir(parents=True, exist_ok=True)

        embedder = OpenAIEmbedder(
            id=self._config.embedding_model,
            api_key=self._config.api_key,
            base_url=self._config.base_url,
        )
        vector_db = LanceDb(
            uri=uri,
            table_name=self._config.collection_name,
            embedder=embedder,
        )
        logger.info(f"Connected to vector store {uri} (table {self._config.collection_name})")
        return Knowledge(vector_db=vector_db)

    @property
    def knowledge(self) -> Knowledge:
        """The connected knowledge base, opened on first access."""
        if self._knowledge is None:
            self._knowledge = self._connect()
        return self._knowledge

    def reset(self) -> None:
        """Drop the current connection; the next call reconnects."""
        self._knowledge = None

    async def index(self, chunks: list[Chunk]) -> int:
        """Embed and store chunks.

        Args:
            chunks: Chunks to index, in document order.

        Returns:
            Number of chunks written.

        Raises:
            VectorStoreError: If embedding or storage fails.
        """
        try:
            knowledge = self.knowledge
            for position, chunk in enumerate(chunks, start=1):
                name = chunk.metadata.source_name
                if len(chunks) > 1:
                    name = f"{name} ({chunk.metadata.locator or position})"
                await knowledge.add_content_async(
                    name=name,
                    text_content=chunk.text,
                    metadata=_chunk_metadata(chunk),
                )
        except Exception as e:
            self.reset()
            raise VectorStoreError(str(e) or e.__class__.__name__) from e

        return len(chunks)

    async def retrieve_top_k(self, query: str, k: int | None = None) -> list[Chunk]:
        """Return the k chunks most similar to a query.

        Args:
            query: The user's question; embedded by the vector store.
            k: Result count. Defaults to the configured top_k.

        Returns:
            Chunks ordered most relevant first. May be empty.

        Raises:
            RetrievalError: If the search fails.
        """
        try:
            documents = await self.knowledge.async_search(
                query=query,
                max_results=k or self._config.top_k,
            )
        except Exception as e:
            self.reset()
            raise RetrievalError(str(e) or e.__class__.__name__) from e

        return [document_to_chunk(d) for d in documents]


# Module-level singleton instance
_knowledge_service: KnowledgeService | None = None


def get_knowledge_service() -> KnowledgeService:
    """Get or create the global knowledge service.

    Returns:
        The KnowledgeService instance.
    """
    global _knowledge_service
    if _knowledge_service is None:
        _knowledge_service = KnowledgeService()
    return _knowledge_service
