"""Exceptions raised while turning submissions into chunks."""


class IngestError(Exception):
    """Raised when a submission cannot be parsed or fetched."""

    pass


class EmptyContentError(IngestError):
    """Raised when a submission yields no indexable text."""

    pass


class WebsiteFetchError(IngestError):
    """Raised when a website cannot be fetched or converted to text."""

    pass
