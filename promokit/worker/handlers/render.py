"""render_preview, render_pdf and render_social_image."""

from __future__ import annotations

from promokit.jobs.models import RenderPdfPayload, RenderPreviewPayload, RenderSocialImagePayload
from promokit.render.promo_data import load_template_data
from promokit.render.registry import SOCIAL_TEMPLATE_ID, render_template
from promokit.worker.handlers.base import job_handler, save_asset

PROMO_STATUS_READY = "ready"


def _template_data(ctx, payload, watermark: bool):
    return load_template_data(
        ctx.store,
        payload.promo_id,
        payload.account_id,
        watermark,
        branch_id=payload.branch_id,
        branch_name=payload.branch_name,
    )


@job_handler(RenderPreviewPayload)
def handle_render_preview(ctx, payload: RenderPreviewPayload) -> dict:
    data = _template_data(ctx, payload, watermark=False)
    html = render_template(data.promo.template_id or ctx.settings.DEFAULT_TEMPLATE_ID, data)
    png = ctx.renderer.render_preview(html)

    key = save_asset(
        ctx,
        payload,
        asset_type="preview",
        segment="preview",
        ext="png",
        content_type="image/png",
        data=png,
        branch_id=payload.branch_id,
    )
    ctx.store.set_promo_status(payload.promo_id, PROMO_STATUS_READY)
    return {"s3Key": key, "sizeBytes": len(png)}


@job_handler(RenderPdfPayload)
def handle_render_pdf(ctx, payload: RenderPdfPayload) -> dict:
    data = _template_data(ctx, payload, watermark=payload.watermark)
    html = render_template(data.promo.template_id or ctx.settings.DEFAULT_TEMPLATE_ID, data)
    pdf = ctx.renderer.render_pdf(html)

    key = save_asset(
        ctx,
        payload,
        asset_type="pdf",
        segment="pdf",
        ext="pdf",
        content_type="application/pdf",
        data=pdf,
        branch_id=payload.branch_id,
    )
    return {"s3Key": key, "sizeBytes": len(pdf)}


@job_handler(RenderSocialImagePayload)
def handle_render_social_image(ctx, payload: RenderSocialImagePayload) -> dict:
    data = _template_data(ctx, payload, watermark=payload.watermark)
    html = render_template(SOCIAL_TEMPLATE_ID, data)
    png = ctx.renderer.render_social_image(html)
    captions = ctx.copywriter.generate_social_captions(data)

    key = save_asset(
        ctx,
        payload,
        asset_type="social_image",
        segment="social",
        ext="png",
        content_type="image/png",
        data=png,
        branch_id=payload.branch_id,
    )
    return {"s3Key": key, "sizeBytes": len(png), "captions": captions}
