"""Integration tests for components working together as a system.

Coverage:
    - Indexing endpoint with real parsers and form validation
    - Chat endpoint SSE framing and the error contract
    - UI session controller talking to the app through the HTTP client

Requests go through httpx's ASGITransport; nothing binds a port.
"""
