"""Chat endpoint streaming grounded answers as Server-Sent Events."""

import logging
from collections.abc import AsyncGenerator, AsyncIterator

from fastapi import APIRouter, Request, status
from fastapi.responses import StreamingResponse

from ragdemo.agent.composer import CompletionError, get_answer_composer
from ragdemo.agent.knowledge import RetrievalError
from ragdemo.api.errors import APIError
from ragdemo.models.schemas import ChatRequest, ErrorResponse, StreamEvent
from ragdemo.streaming.sse import SSE_HEADERS, SSE_MEDIA_TYPE, encode_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


async def _event_frames(
    events: AsyncIterator[StreamEvent],
    request: Request,
) -> AsyncGenerator[str]:
    """Encode events as SSE frames until the stream ends or the client leaves.

    Closing the event stream on exit releases the upstream model stream.
    """
    try:
        async for event in events:
            if await request.is_disconnected():
                logger.info("Client disconnected, stopping answer stream")
                break
            yield encode_event(event)
    finally:
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            await aclose()


@router.post(
    "/chat",
    response_class=StreamingResponse,
    responses={
        200: {"content": {SSE_MEDIA_TYPE: {}}},
        500: {"model": ErrorResponse},
    },
)
async def chat(body: ChatRequest, request: Request) -> StreamingResponse:
    """Answer a question from the indexed sources.

    Streams ``data: {"text": ...}`` frames. Failures before the first
    fragment return 500 with an error body; failures after it end the
    stream with an error sentinel fragment.

    Raises:
        500: Retrieval or model failure before streaming started.
    """
    try:
        events = await get_answer_composer().answer(body.query)
    except (RetrievalError, CompletionError) as e:
        logger.error(f"Chat failed before streaming: {e}")
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e)) from e
    except Exception as e:
        logger.exception("Chat failed before streaming")
        raise APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e) or "Chat request failed",
        ) from e

    return StreamingResponse(
        _event_frames(events, request),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )
