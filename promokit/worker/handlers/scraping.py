"""brand_bootstrap and product_url_scrape."""

from __future__ import annotations

import logging

from promokit.brand.scraper import rehost_logo, scrape_brand
from promokit.jobs.models import BrandBootstrapPayload, ProductUrlScrapePayload
from promokit.products.scraper import scrape_product
from promokit.worker.handlers.base import job_handler

logger = logging.getLogger(__name__)


@job_handler(BrandBootstrapPayload)
def handle_brand_bootstrap(ctx, payload: BrandBootstrapPayload) -> dict:
    settings = ctx.settings
    signals = scrape_brand(
        ctx.http,
        payload.url,
        timeout=settings.SCRAPE_TIMEOUT_SECONDS,
        secondary_timeout=settings.SCRAPE_SECONDARY_TIMEOUT_SECONDS,
    )

    logo_key = None
    if signals.logo_url:
        logo_key = rehost_logo(
            ctx.http,
            ctx.storage,
            payload.account_id,
            signals.logo_url,
            signals.logo_label or "logo",
            timeout=settings.SCRAPE_TIMEOUT_SECONDS,
        )

    # Only overwrite what was actually resolved this time.
    fields = {"website_url": payload.url}
    if signals.logo_url:
        fields["logo_url"] = signals.logo_url
        fields["logo_key"] = logo_key
    if signals.colors:
        fields["colors"] = signals.colors
    ctx.store.upsert_brand_kit(payload.account_id, fields)

    return {
        "logoUrl": signals.logo_url,
        "logoKey": logo_key,
        "colors": signals.colors,
        "websiteUrl": payload.url,
    }


@job_handler(ProductUrlScrapePayload)
def handle_product_url_scrape(ctx, payload: ProductUrlScrapePayload) -> dict:
    ctx.store.get_promo(payload.promo_id, payload.account_id)
    item = ctx.store.get_item(payload.item_id, payload.promo_id)

    signals = scrape_product(ctx.http, payload.url, timeout=ctx.settings.SCRAPE_TIMEOUT_SECONDS)

    fields = {
        "name": signals.title or item.get("name") or "Product",
        "image_url": signals.image_url or item.get("image_url"),
    }
    if signals.price is not None and signals.price > 0:
        fields["price"] = signals.price
    ctx.store.update_item(payload.item_id, fields)

    return {"title": signals.title, "imageUrl": signals.image_url, "price": signals.price}
