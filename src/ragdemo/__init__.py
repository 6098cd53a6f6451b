"""RAG Stream Demo - grounded, streamed answers over your own text, files and websites.

Combines FastAPI for SSE streaming, Agno for vector search and LLM calls,
NiceGUI for the browser interface, and Pydantic for data validation.

Components:
    - api: Chat and indexing endpoints
    - agent: Knowledge base access and answer composition
    - parsing: Text, file and website ingestion into chunks
    - streaming: Server-Sent Events encoding and decoding
    - ui: Session controller and web interface
    - models: Request/response and chunk schemas
"""

__version__ = "0.1.0"
