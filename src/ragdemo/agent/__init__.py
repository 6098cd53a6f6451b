"""Retrieval and answer generation.

Responsibilities:
    - Knowledge base access (LanceDB through Agno) for indexing and top-k search
    - Grounded system prompt assembly from retrieved chunks
    - Streaming completion through an Agno Agent with an OpenAI-compatible model

Keeps the HTTP layer free of provider details.
"""

from ragdemo.agent.composer import (
    FALLBACK_ANSWER,
    STREAM_ERROR_TEXT,
    AnswerComposer,
    CompletionError,
    build_system_prompt,
    get_answer_composer,
)
from ragdemo.agent.config import AgentConfig, get_agent_config
from ragdemo.agent.knowledge import (
    KnowledgeService,
    RetrievalError,
    VectorStoreError,
    get_knowledge_service,
)

__all__ = [
    "FALLBACK_ANSWER",
    "STREAM_ERROR_TEXT",
    "AgentConfig",
    "AnswerComposer",
    "CompletionError",
    "KnowledgeService",
    "RetrievalError",
    "VectorStoreError",
    "build_system_prompt",
    "get_agent_config",
    "get_answer_composer",
    "get_knowledge_service",
]
