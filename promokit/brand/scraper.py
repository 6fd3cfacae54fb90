"""
Brand signal extraction from a company's homepage.

Logo candidates, in priority order (first hit wins):
1. an <img> whose src or alt mentions "logo"
2. a PNG icon link
3. the Open Graph image
4. the Apple touch icon
5. /favicon.ico, probed with HEAD and accepted only for image/* responses

Colors come from the theme-color meta tag plus hex literals found in the
first linked stylesheet, deduplicated and capped at MAX_COLORS.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import httpx
from botocore.exceptions import BotoCoreError, ClientError
from bs4 import BeautifulSoup

from promokit.brand.colors import is_hex_color, refine_palette
from promokit.core.http import fetch_text, resolve_url
from promokit.core.s3_keys import brand_logo_key, extension_for_content_type

logger = logging.getLogger(__name__)

MAX_COLORS = 5
CSS_HEX_RE = re.compile(r"#[0-9a-fA-F]{6}(?![0-9a-fA-F])")
LOGO_RE = re.compile(r"logo", re.IGNORECASE)


@dataclass
class BrandSignals:
    website_url: str
    logo_url: Optional[str] = None
    logo_label: Optional[str] = None
    colors: List[str] = field(default_factory=list)


def _attr(tag, name: str) -> str:
    if tag is None:
        return ""
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()


def _has_rel(tag, rel: str) -> bool:
    values = tag.get("rel") or []
    if isinstance(values, str):
        values = values.split()
    return rel in [v.lower() for v in values]


def find_logo_candidate(soup: BeautifulSoup, base_url: str) -> Optional[Tuple[str, str]]:
    """First logo candidate found in the markup as (absolute_url, label)."""
    for img in soup.find_all("img"):
        src = _attr(img, "src")
        if src and (LOGO_RE.search(src) or LOGO_RE.search(_attr(img, "alt"))):
            return resolve_url(src, base_url), "logo"

    for link in soup.find_all("link"):
        if _has_rel(link, "icon") and _attr(link, "type").lower() == "image/png" and _attr(link, "href"):
            return resolve_url(_attr(link, "href"), base_url), "icon"

    og_image = _attr(soup.find("meta", attrs={"property": "og:image"}), "content")
    if og_image:
        return resolve_url(og_image, base_url), "og-image"

    for link in soup.find_all("link"):
        if _has_rel(link, "apple-touch-icon") and _attr(link, "href"):
            return resolve_url(_attr(link, "href"), base_url), "apple-touch-icon"

    return None


def probe_favicon(client: httpx.Client, base_url: str, timeout: float) -> Optional[str]:
    """HEAD /favicon.ico; returns its URL only when the server answers with an image."""
    favicon_url = resolve_url("/favicon.ico", base_url)
    try:
        response = client.head(favicon_url, timeout=timeout)
    except httpx.HTTPError as e:
        logger.info(f"Favicon probe failed for {favicon_url}: {e}")
        return None
    content_type = response.headers.get("content-type", "").lower()
    if response.is_success and content_type.startswith("image/"):
        return favicon_url
    return None


def theme_color(soup: BeautifulSoup) -> Optional[str]:
    value = _attr(soup.find("meta", attrs={"name": "theme-color"}), "content")
    if value.startswith("#") and is_hex_color(value):
        return value.lower()
    return None


def first_stylesheet_url(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    for link in soup.find_all("link"):
        if _has_rel(link, "stylesheet") and _attr(link, "href"):
            return resolve_url(_attr(link, "href"), base_url)
    return None


def css_hex_colors(css_text: str, limit: int = MAX_COLORS) -> List[str]:
    seen: List[str] = []
    for match in CSS_HEX_RE.findall(css_text or ""):
        color = match.lower()
        if color not in seen:
            seen.append(color)
        if len(seen) >= limit:
            break
    return seen


def merge_colors(*groups: List[str], limit: int = MAX_COLORS) -> List[str]:
    merged: List[str] = []
    for group in groups:
        for color in group:
            if color not in merged:
                merged.append(color)
    return merged[:limit]


def fetch_stylesheet_colors(client: httpx.Client, css_url: str, timeout: float) -> List[str]:
    """Best effort: any failure yields no colors."""
    try:
        response = client.get(css_url, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Skipping stylesheet colors from {css_url}: {e}")
        return []
    return css_hex_colors(response.text)


def scrape_brand(
    client: httpx.Client,
    url: str,
    *,
    timeout: float,
    secondary_timeout: float,
) -> BrandSignals:
    """Fetch the homepage and extract the logo and a contrast-refined palette."""
    html = fetch_text(client, url, timeout=timeout)
    soup = BeautifulSoup(html, "html.parser")
    signals = BrandSignals(website_url=url)

    candidate = find_logo_candidate(soup, url)
    if candidate is None:
        favicon = probe_favicon(client, url, secondary_timeout)
        if favicon:
            candidate = (favicon, "favicon")
    if candidate:
        signals.logo_url, signals.logo_label = candidate

    themed = [c for c in [theme_color(soup)] if c]
    css_colors: List[str] = []
    css_url = first_stylesheet_url(soup, url)
    if css_url:
        css_colors = fetch_stylesheet_colors(client, css_url, secondary_timeout)

    signals.colors = refine_palette(merge_colors(themed, css_colors))
    logger.info(
        f"Brand signals for {url}: logo={signals.logo_label or 'none'} colors={len(signals.colors)}"
    )
    return signals


def rehost_logo(
    client: httpx.Client,
    storage,
    account_id: str,
    logo_url: str,
    label: str,
    *,
    timeout: float,
) -> Optional[str]:
    """
    Copy an external logo into the assets bucket.

    Returns the new object key, or None when the download or upload fails; the
    caller keeps the external URL either way.
    """
    try:
        response = client.get(logo_url, timeout=timeout)
        response.raise_for_status()
        content_type = response.headers.get("content-type", "image/png").split(";")[0].strip()
        key = brand_logo_key(account_id, label, extension_for_content_type(content_type))
        storage.upload_bytes(storage.assets_bucket, key, response.content, content_type or "image/png")
        return key
    except (httpx.HTTPError, BotoCoreError, ClientError, ValueError) as e:
        logger.warning(f"Could not re-host logo {logo_url}: {e}")
        return None
