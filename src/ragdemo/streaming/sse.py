"""Server-Sent Events framing for answer fragments.

Server side, each StreamEvent is written as one ``data:`` frame ending in a
blank line. Client side, SSEDecoder rebuilds events from arbitrarily split
network chunks; a frame that cannot be parsed is logged and skipped.
"""

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator

from pydantic import ValidationError

from ragdemo.models.schemas import StreamEvent

logger = logging.getLogger(__name__)

SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
FRAME_TERMINATOR = "\n\n"
_DATA_PREFIX = "data:"


def encode_event(event: StreamEvent) -> str:
    """Serialize one event as an SSE frame.

    Args:
        event: The fragment to send.

    Returns:
        ``data: {"text": ...}`` followed by a blank line.
    """
    return f"{_DATA_PREFIX} {event.model_dump_json(exclude_none=True)}{FRAME_TERMINATOR}"


class SSEDecoder:
    """Incremental decoder for a stream of SSE frames.

    Attributes:
        text: Concatenation of every fragment decoded so far.
    """

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.text = ""

    def feed(self, data: bytes | str) -> list[StreamEvent]:
        """Add received data and return the events it completes.

        Args:
            data: Raw bytes or text as received from the transport.

        Returns:
            Events for every frame completed by this data, in order.
        """
        if isinstance(data, bytes):
            data = self._utf8.decode(data)
        self._buffer += data.replace("\r\n", "\n")

        events: list[StreamEvent] = []
        while FRAME_TERMINATOR in self._buffer:
            frame, self._buffer = self._buffer.split(FRAME_TERMINATOR, 1)
            event = self._parse_frame(frame)
            if event is not None:
                events.append(event)
        return events

    def close(self) -> list[StreamEvent]:
        """Flush a trailing frame that arrived without a terminator."""
        self._buffer += self._utf8.decode(b"", final=True)
        frame, self._buffer = self._buffer, ""
        event = self._parse_frame(frame) if frame.strip() else None
        return [event] if event is not None else []

    def _parse_frame(self, frame: str) -> StreamEvent | None:
        payload = "\n".join(
            line[len(_DATA_PREFIX):].removeprefix(" ")
            for line in frame.split("\n")
            if line.startswith(_DATA_PREFIX)
        )
        if not payload:
            return None

        try:
            event = StreamEvent.model_validate(json.loads(payload))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Skipping malformed stream frame {frame!r}: {e}")
            return None

        self.text += event.text
        return event


async def decode_stream(chunks: AsyncIterable[bytes]) -> AsyncIterator[StreamEvent]:
    """Decode an async byte stream into StreamEvents as they complete."""
    decoder = SSEDecoder()
    async for chunk in chunks:
        for event in decoder.feed(chunk):
            yield event
    for event in decoder.close():
        yield event
