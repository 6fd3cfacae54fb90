"""parse_upload: spreadsheet upload -> promo items."""

from __future__ import annotations

import logging

from promokit.imports.columns import infer_items
from promokit.imports.spreadsheet import read_rows
from promokit.jobs.models import ParseUploadPayload
from promokit.worker.handlers.base import job_handler

logger = logging.getLogger(__name__)


@job_handler(ParseUploadPayload)
def handle_parse_upload(ctx, payload: ParseUploadPayload) -> dict:
    ctx.store.get_promo(payload.promo_id, payload.account_id)

    data = ctx.storage.download_bytes(ctx.storage.uploads_bucket, payload.s3_key)
    rows = read_rows(payload.s3_key, data)

    mapping = None
    if payload.mapping_id:
        mapping = ctx.store.get_mapping(payload.mapping_id, payload.account_id)
        if mapping is None:
            logger.warning(
                f"Column mapping {payload.mapping_id} not found for account {payload.account_id}; "
                "using smart detection"
            )

    items = infer_items(rows, mapping)
    created = ctx.store.replace_items(payload.promo_id, items)
    ctx.store.mark_upload_parsed(payload.upload_id)

    logger.info(f"Parsed upload {payload.upload_id}: {len(rows)} rows, {created} items")
    return {"itemsCreated": created}
