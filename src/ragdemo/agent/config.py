"""Settings for the knowledge base and the chat model.

Values come from the process environment, with a ``.env`` file loaded on
import. The chat model and the embedder share one OpenAI-compatible
provider, so a single key and base URL cover both.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

load_dotenv()

COLLECTION_NAME = "rag_collection"

_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_DEFAULT_VECTOR_DB_URI = _PROJECT_ROOT / "data" / "knowledge"


def _env(name: str, default: str | None = None):
    """Default factory reading ``name`` from the environment."""
    return lambda: os.getenv(name) or default


class AgentConfig(BaseModel):
    """Provider, storage and generation settings.

    Attributes:
        api_key: Key for both chat completions and embeddings.
        base_url: OpenAI-compatible endpoint, None for OpenAI itself.
        model_name: Chat model identifier.
        embedding_model: Embedding model identifier.
        vector_db_uri: LanceDB location (local directory or remote URI).
        collection_name: Table holding every indexed chunk.
        top_k: Chunks retrieved per question.
        temperature: Sampling temperature for answers.
        max_tokens: Upper bound on answer length.
    """

    # environment strings are coerced and range-checked like explicit values
    model_config = ConfigDict(validate_default=True)

    # provider
    api_key: str = Field(
        default_factory=lambda: os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY", ""),
    )
    base_url: str | None = Field(default_factory=_env("LLM_BASE_URL"))
    model_name: str = Field(default_factory=_env("LLM_MODEL", "gpt-4o-mini"))
    embedding_model: str = Field(default_factory=_env("EMBEDDING_MODEL", "text-embedding-3-small"))

    # storage and retrieval
    vector_db_uri: str = Field(default_factory=_env("VECTOR_DB_URI", str(_DEFAULT_VECTOR_DB_URI)))
    collection_name: str = COLLECTION_NAME
    top_k: int = Field(default_factory=_env("RETRIEVAL_TOP_K", "4"), ge=1, le=50)

    # generation
    temperature: float = Field(default_factory=_env("LLM_TEMPERATURE", "0.7"), ge=0.0, le=2.0)
    max_tokens: int = Field(default_factory=_env("LLM_MAX_TOKENS", "1024"), ge=1, le=128000)

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API key required. Set LLM_API_KEY or OPENAI_API_KEY in .env")
        return v.strip()


def get_agent_config() -> AgentConfig:
    """Build settings from the current environment.

    Raises:
        ValidationError: If no API key is set or a value is out of range.
    """
    return AgentConfig()
