"""
S3 object key builders for everything the worker writes.

Layout:
- `assets/<account_id>/<promo_id>/[branches/<branch_id>/]<segment>/<timestamp>.<ext>`
- `brand-logos/<account_id>/<label>-<timestamp>.<ext>`

Timestamps are milliseconds since the epoch, so keys sort by creation time.
"""

from __future__ import annotations

import time
from typing import Optional


def now_millis() -> int:
    return int(time.time() * 1000)


def asset_key(
    account_id: str,
    promo_id: str,
    segment: str,
    ext: str,
    *,
    branch_id: Optional[str] = None,
    timestamp: Optional[int] = None,
) -> str:
    branch_segment = f"branches/{branch_id}/" if branch_id else ""
    ts = timestamp if timestamp is not None else now_millis()
    return f"assets/{account_id}/{promo_id}/{branch_segment}{segment}/{ts}.{ext.lstrip('.')}"


def brand_logo_key(account_id: str, label: str, ext: str, *, timestamp: Optional[int] = None) -> str:
    ts = timestamp if timestamp is not None else now_millis()
    return f"brand-logos/{account_id}/{label}-{ts}.{ext.lstrip('.')}"


def extension_for_content_type(content_type: Optional[str]) -> str:
    """Image extension for a logo download (svg/jpg, defaulting to png)."""
    value = (content_type or "").lower()
    if "svg" in value:
        return "svg"
    if "jpeg" in value or "jpg" in value:
        return "jpg"
    return "png"


def filename_from_key(key: str) -> str:
    """Last path segment of a key, used for names inside ZIP bundles."""
    name = key.rsplit("/", 1)[-1]
    return name or key.replace("/", "_")
