"""Product page signal extraction (title, image, price)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from promokit.core.http import fetch_text, resolve_url
from promokit.imports.columns import parse_price

logger = logging.getLogger(__name__)

PRICE_META_PROPERTIES = ("product:price:amount", "og:price:amount")


@dataclass
class ProductSignals:
    title: str = ""
    image_url: Optional[str] = None
    price: Optional[float] = None


def _meta(soup: BeautifulSoup, prop: str) -> str:
    tag = soup.find("meta", attrs={"property": prop})
    return (tag.get("content") or "").strip() if tag else ""


def extract_product(html: str, page_url: str) -> ProductSignals:
    soup = BeautifulSoup(html, "html.parser")

    title = _meta(soup, "og:title")
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip()
    if not title:
        h1 = soup.find("h1")
        title = h1.get_text(" ", strip=True) if h1 else ""

    image = _meta(soup, "og:image")

    price = None
    for prop in PRICE_META_PROPERTIES:
        raw = _meta(soup, prop)
        if raw:
            parsed = parse_price(raw)
            # Only positive prices are worth applying.
            price = parsed if parsed > 0 else None
            break

    return ProductSignals(
        title=title,
        image_url=resolve_url(image, page_url) if image else None,
        price=price,
    )


def scrape_product(client: httpx.Client, url: str, *, timeout: float) -> ProductSignals:
    html = fetch_text(client, url, timeout=timeout)
    signals = extract_product(html, url)
    logger.info(f"Product signals for {url}: title={bool(signals.title)} image={bool(signals.image_url)}")
    return signals
