"""Unit tests for individual components in isolation.

Coverage:
    - parsing/: PDF, CSV, Word, JSON and website extraction
    - agent/: configuration, knowledge service, answer composition
    - streaming/: SSE encoding and incremental decoding
    - ui/: session controller state transitions

Uses mocks for external services. Leverages pytest-check for multiple
assertions per test.
"""
