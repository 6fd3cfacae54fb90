"""Job handlers, keyed by job type."""

from typing import Dict

from promokit.jobs.models import JobType
from promokit.worker.handlers.base import Handler, job_handler
from promokit.worker.handlers.exports import (
    handle_export_zip,
    handle_generate_coop_report,
    handle_generate_email,
)
from promokit.worker.handlers.imports import handle_parse_upload
from promokit.worker.handlers.render import (
    handle_render_pdf,
    handle_render_preview,
    handle_render_social_image,
)
from promokit.worker.handlers.scraping import handle_brand_bootstrap, handle_product_url_scrape

HANDLERS: Dict[JobType, Handler] = {
    JobType.parse_upload: handle_parse_upload,
    JobType.brand_bootstrap: handle_brand_bootstrap,
    JobType.product_url_scrape: handle_product_url_scrape,
    JobType.render_preview: handle_render_preview,
    JobType.render_pdf: handle_render_pdf,
    JobType.render_social_image: handle_render_social_image,
    JobType.export_zip: handle_export_zip,
    JobType.generate_email: handle_generate_email,
    JobType.generate_coop_report: handle_generate_coop_report,
}

__all__ = ["HANDLERS", "Handler", "job_handler"]
