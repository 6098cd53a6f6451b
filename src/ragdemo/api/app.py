"""FastAPI application factory.

Wires CORS, the JSON error contract and the indexing and chat routers
into one app. The NiceGUI page is mounted onto the same app by main.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from ragdemo import __version__
from ragdemo.agent.config import get_agent_config
from ragdemo.api.chat import router as chat_router
from ragdemo.api.errors import register_error_handlers
from ragdemo.api.indexing import router as indexing_router

logger = logging.getLogger(__name__)

SERVICE_NAME = "rag-stream-demo"

ROUTERS = (indexing_router, chat_router)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Report the active provider settings on startup.

    The knowledge base and the model are created lazily, so a missing key
    is only logged here and surfaces as a 500 on the first request.
    """
    try:
        config = get_agent_config()
        logger.info(
            f"Starting {SERVICE_NAME} {__version__}: model={config.model_name}, "
            f"embeddings={config.embedding_model}, vector store={config.vector_db_uri}"
        )
    except ValidationError as e:
        logger.warning(f"Starting {SERVICE_NAME} without a valid configuration: {e}")
    yield
    logger.info(f"Shutting down {SERVICE_NAME}")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="RAG Stream Demo API",
        description=(
            "Indexes raw text, files and websites into a vector store and "
            "streams grounded, cited answers as Server-Sent Events."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    register_error_handlers(application)
    for router in ROUTERS:
        application.include_router(router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}

    return application


app = create_app()
