"""Server entry point: API and browser UI on one uvicorn process.

Settings come from the environment (``.env`` is loaded first):
HOST, PORT, LOG_LEVEL and NICEGUI_STORAGE_SECRET here, provider and
vector store settings in ragdemo.agent.config.
"""

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> str:
    """Send all records to stdout at LOG_LEVEL (INFO by default)."""
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler(sys.stdout)])
    return level


def main() -> None:
    """Mount the chat page onto the FastAPI app and serve both."""
    import uvicorn
    from nicegui import ui

    from ragdemo.api.app import create_app
    from ragdemo.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    level = configure_logging()
    app = create_app()
    ui.run_with(
        app,
        title="RAG Assistant",
        favicon="🤖",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "rag-stream-demo-secret"),
    )

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Chat UI on http://localhost:{port}/, API docs on http://localhost:{port}/docs")

    uvicorn.run(app, host=host, port=port, log_level=level.lower())


if __name__ == "__main__":
    main()
