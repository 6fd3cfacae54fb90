"""generate_email, export_zip and generate_coop_report."""

from __future__ import annotations

import csv
import io
import logging
import zipfile

from promokit.core.s3_keys import filename_from_key
from promokit.jobs.models import ExportZipPayload, GenerateCoopReportPayload, GenerateEmailPayload
from promokit.render.promo_data import load_template_data
from promokit.render.registry import render_email
from promokit.worker.handlers.base import job_handler, save_asset

logger = logging.getLogger(__name__)

COOP_HEADER = ["Vendor", "Product Name", "SKU", "Price", "Co-op Amount", "Co-op %", "Note"]


@job_handler(GenerateEmailPayload)
def handle_generate_email(ctx, payload: GenerateEmailPayload) -> dict:
    data = load_template_data(
        ctx.store,
        payload.promo_id,
        payload.account_id,
        False,
        branch_id=payload.branch_id,
        branch_name=payload.branch_name,
    )
    email_copy = ctx.copywriter.generate_email_copy(data)
    html = render_email(data, email_copy).encode("utf-8")

    key = save_asset(
        ctx,
        payload,
        asset_type="email_html",
        segment="email",
        ext="html",
        content_type="text/html",
        data=html,
        branch_id=payload.branch_id,
    )
    return {
        "s3Key": key,
        "sizeBytes": len(html),
        "subject": email_copy.get("subject", ""),
        "preheader": email_copy.get("preheader", ""),
    }


def build_zip(files) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=6) as archive:
        for name, data in files:
            archive.writestr(name, data)
    return buffer.getvalue()


@job_handler(ExportZipPayload)
def handle_export_zip(ctx, payload: ExportZipPayload) -> dict:
    ctx.store.get_promo(payload.promo_id, payload.account_id)
    assets = ctx.store.list_assets(payload.promo_id, payload.account_id)

    bucket = ctx.storage.assets_bucket
    files = [
        (f"{asset['type']}/{filename_from_key(asset['s3_key'])}", ctx.storage.download_bytes(bucket, asset["s3_key"]))
        for asset in assets
    ]
    archive = build_zip(files)

    key = save_asset(
        ctx,
        payload,
        asset_type="zip",
        segment="zip",
        ext="zip",
        content_type="application/zip",
        data=archive,
    )
    return {"s3Key": key, "sizeBytes": len(archive), "fileCount": len(files)}


def _money(value) -> str:
    return f"{float(value):.2f}"


def coop_rows(items):
    for item in items:
        price = item.get("price")
        amount = item.get("coop_amount")
        percent = ""
        if amount is not None and price is not None and float(price) != 0:
            percent = f"{float(amount) / float(price) * 100:.1f}"
        yield [
            item.get("coop_vendor") or "",
            item.get("name") or "",
            item.get("sku") or "",
            _money(price) if price else "",
            _money(amount) if amount is not None else "",
            percent,
            item.get("coop_note") or "",
        ]


def build_coop_csv(items) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(COOP_HEADER)
    writer.writerows(coop_rows(items))
    return buffer.getvalue().encode("utf-8")


@job_handler(GenerateCoopReportPayload)
def handle_generate_coop_report(ctx, payload: GenerateCoopReportPayload) -> dict:
    promo = ctx.store.get_promo(payload.promo_id, payload.account_id)
    account = ctx.store.get_account(payload.account_id) or {}
    items = ctx.store.list_coop_items(payload.promo_id)

    report = build_coop_csv(items)
    key = save_asset(
        ctx,
        payload,
        asset_type="coop_report",
        segment="coop",
        ext="csv",
        content_type="text/csv",
        data=report,
    )
    return {
        "s3Key": key,
        "rowCount": len(items),
        "promoTitle": promo.get("title") or "",
        "accountName": account.get("name") or "",
    }
