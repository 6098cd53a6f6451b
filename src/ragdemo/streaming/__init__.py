"""Server-Sent Events transport for streamed answers."""

from ragdemo.streaming.sse import (
    SSE_HEADERS,
    SSE_MEDIA_TYPE,
    SSEDecoder,
    decode_stream,
    encode_event,
)

__all__ = ["SSE_HEADERS", "SSE_MEDIA_TYPE", "SSEDecoder", "decode_stream", "encode_event"]
