"""Outbound HTTP helpers shared by the scraping handlers."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin

import httpx

from promokit.core.config import get_settings
from promokit.core.exceptions import ScrapeError


def build_http_client() -> httpx.Client:
    """Worker-wide HTTP client. Every request still passes its own timeout."""
    settings = get_settings()
    return httpx.Client(
        follow_redirects=True,
        timeout=settings.SCRAPE_TIMEOUT_SECONDS,
        headers={
            "User-Agent": settings.SCRAPE_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        },
    )


def resolve_url(path: Optional[str], base: str) -> Optional[str]:
    """Resolve a possibly-relative URL against the page it was found on."""
    if not path:
        return None
    value = path.strip()
    if not value:
        return None
    try:
        return urljoin(base, value)
    except ValueError:
        return value


def fetch_text(client: httpx.Client, url: str, *, timeout: float) -> str:
    """GET a page and return its body text; network and HTTP errors become ScrapeError."""
    try:
        response = client.get(url, timeout=timeout)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        raise ScrapeError(f"Timed out fetching {url}") from e
    except httpx.HTTPStatusError as e:
        raise ScrapeError(f"Fetching {url} returned HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise ScrapeError(f"Failed to fetch {url}: {e}") from e
    return response.text
