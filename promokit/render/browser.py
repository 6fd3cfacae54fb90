"""
Headless Chromium adapter (Playwright, sync API).

A fresh browser is launched per render and always closed, including on
failure. Every step runs under RENDER_TIMEOUT_SECONDS; Playwright timeouts and
crashes surface as RenderError so the owning job fails.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from promokit.core.config import get_settings
from promokit.core.exceptions import RenderError

logger = logging.getLogger(__name__)

CHROMIUM_CANDIDATES = (
    "/usr/bin/chromium-browser",
    "/usr/bin/chromium",
    "/usr/bin/google-chrome",
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
)
LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

# US Letter at 96dpi.
PREVIEW_VIEWPORT = {"width": 816, "height": 1056}
SOCIAL_VIEWPORT = {"width": 1080, "height": 1080}


def find_chromium(explicit: Optional[str] = None) -> Optional[str]:
    """CHROMIUM_PATH, then a system install; None means Playwright's bundled browser."""
    if explicit:
        return explicit
    for candidate in CHROMIUM_CANDIDATES:
        if os.path.isfile(candidate):
            return candidate
    return None


class BrowserRenderer:
    def __init__(self, chromium_path: Optional[str] = None, timeout_seconds: Optional[float] = None) -> None:
        settings = get_settings()
        self.chromium_path = find_chromium(chromium_path if chromium_path is not None else settings.CHROMIUM_PATH)
        self.timeout_ms = int(1000 * (timeout_seconds if timeout_seconds is not None else settings.RENDER_TIMEOUT_SECONDS))

    @contextmanager
    def _page(self, html: str, viewport: Optional[dict] = None) -> Iterator[Page]:
        with sync_playwright() as p:
            try:
                browser = p.chromium.launch(
                    executable_path=self.chromium_path,
                    args=LAUNCH_ARGS,
                    timeout=self.timeout_ms,
                )
            except PlaywrightError as e:
                raise RenderError(f"Could not launch Chromium: {e}") from e

            try:
                page = browser.new_page(viewport=viewport) if viewport else browser.new_page()
                page.set_default_timeout(self.timeout_ms)
                page.set_content(html, wait_until="networkidle", timeout=self.timeout_ms)
                yield page
            except PlaywrightTimeoutError as e:
                raise RenderError(f"Render timed out after {self.timeout_ms // 1000}s") from e
            except PlaywrightError as e:
                raise RenderError(f"Render failed: {e}") from e
            finally:
                browser.close()

    def screenshot(self, html: str, viewport: dict) -> bytes:
        with self._page(html, viewport) as page:
            return page.screenshot(type="png", full_page=False)

    def render_preview(self, html: str) -> bytes:
        return self.screenshot(html, PREVIEW_VIEWPORT)

    def render_social_image(self, html: str) -> bytes:
        return self.screenshot(html, SOCIAL_VIEWPORT)

    def render_pdf(self, html: str) -> bytes:
        with self._page(html) as page:
            return page.pdf(
                format="Letter",
                print_background=True,
                margin={"top": "0", "right": "0", "bottom": "0", "left": "0"},
            )
