"""Test package for the RAG streaming demo.

Structure:
    - unit/: Parsers, knowledge service, composer, SSE codec, session state
    - integration/: FastAPI endpoints and client flows over ASGITransport

The vector store and the chat model are replaced with in-memory fakes
(see fakes.py), so no provider credentials are required.
Leverages pytest with pytest-check for soft assertions.
"""
