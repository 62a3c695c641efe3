"""
Web Fetcher - Downloads pages for the web task agent and reduces them to text.
"""

import logging
from typing import List, Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

async def fetch_url_content(
    url: str,
    timeout: float = 20.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """
    Fetch a page body.

    Failures are reported as an "Error: ..." string rather than raised,
    so the agent can relay them to the model.
    """
    try:
        async with httpx.AsyncClient(
            headers=BROWSER_HEADERS,
            follow_redirects=True,
            timeout=timeout,
            transport=transport,
        ) as client:
            response = await client.get(url)
    except httpx.HTTPError as e:
        logger.error("Error fetching URL content for %s: %s", url, e)
        return "Error: Could not fetch content from the URL. Please check if it's correct."

    if response.is_error:
        logger.error("Failed to fetch URL: %s, status: %s", url, response.status_code)
        return f"Error: Failed to fetch the URL. Status code: {response.status_code}"

    content_type = response.headers.get("content-type", "")
    if "text/html" not in content_type:
        logger.warning("URL did not return HTML content: %s, got %s", url, content_type or "none")

    return response.text


def sanitize_html(content: str, max_chars: int = 20000) -> str:
    """Drop scripts and styles, keep the visible text, collapse whitespace, truncate."""
    soup = BeautifulSoup(content, "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()
    text = " ".join(soup.get_text(" ").split())
    return text[:max_chars]


def extract_image_urls(content: str, base_url: str) -> List[str]:
    """Absolute, de-duplicated <img src> URLs in document order."""
    soup = BeautifulSoup(content, "html.parser")
    seen = []
    for img in soup.find_all("img", src=True):
        absolute = urljoin(base_url, img["src"].strip())
        if absolute.startswith(("http://", "https://", "data:")) and absolute not in seen:
            seen.append(absolute)
    return seen
