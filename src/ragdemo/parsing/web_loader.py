"""Website loader: fetch a page and reduce it to its readable text."""

import logging
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from ragdemo.models.schemas import Chunk, ChunkMetadata, SourceType
from ragdemo.parsing.errors import WebsiteFetchError

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 30.0  # seconds
_ALLOWED_SCHEMES = {"http", "https"}
_USER_AGENT = "ragdemo/0.1"
_NON_CONTENT_TAGS = ["script", "style", "nav", "footer", "head", "noscript"]


def validate_url(url: str) -> str:
    """Check that a URL is an absolute http(s) address.

    Args:
        url: The submitted website address.

    Returns:
        The URL with surrounding whitespace removed.

    Raises:
        ValueError: If the scheme is not http/https or the host is missing.
    """
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise ValueError(f"Unsupported URL scheme '{parsed.scheme}'. Use http:// or https://")
    if not parsed.hostname:
        raise ValueError(f"URL has no hostname: {url}")
    return url


def html_to_text(html: str) -> str:
    """Strip markup and non-content tags, keeping one line per text block."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(_NON_CONTENT_TAGS):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text(separator="\n").splitlines())
    return "\n".join(line for line in lines if line)


async def load_website(url: str, client: httpx.AsyncClient | None = None) -> list[Chunk]:
    """Fetch a web page and return its text as a single chunk.

    Args:
        url: Page to fetch (http or https).
        client: Optional client to reuse; a short-lived one is created otherwise.

    Returns:
        One chunk whose source name and locator are the URL.

    Raises:
        ValueError: If the URL is malformed.
        WebsiteFetchError: If the page cannot be fetched.
    """
    url = validate_url(url)

    try:
        if client is None:
            async with httpx.AsyncClient(
                timeout=FETCH_TIMEOUT,
                follow_redirects=True,
                headers={"User-Agent": _USER_AGENT},
            ) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise WebsiteFetchError(
            f"Failed to load website: HTTP {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        raise WebsiteFetchError(f"Failed to load website: {e}") from e

    content_type = response.headers.get("content-type", "text/html").split(";")[0].strip()
    text = response.text if content_type == "text/plain" else html_to_text(response.text)
    logger.info(f"Fetched {url} ({len(text)} characters of text)")

    return [
        Chunk(
            text=text,
            metadata=ChunkMetadata(
                source_name=url,
                source_type=SourceType.WEBSITE,
                locator=url,
            ),
        )
    ]
