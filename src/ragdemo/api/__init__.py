"""FastAPI endpoints for the RAG demo.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Streamed, grounded answers (Server-Sent Events)
    - POST /api/indexing: Text, file and website ingestion
"""

from ragdemo.api.app import app, create_app

__all__ = ["app", "create_app"]
