"""Job types, queue message payloads and API schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class JobType(str, Enum):
    parse_upload = "parse_upload"
    brand_bootstrap = "brand_bootstrap"
    product_url_scrape = "product_url_scrape"
    render_preview = "render_preview"
    render_pdf = "render_pdf"
    render_social_image = "render_social_image"
    export_zip = "export_zip"
    generate_email = "generate_email"
    generate_coop_report = "generate_coop_report"


class JobStatus(str, Enum):
    pending = "pending"
    running = "running"
    done = "done"
    failed = "failed"


TERMINAL_STATUSES = {JobStatus.done.value, JobStatus.failed.value}

# Keys every message carries in addition to its type-specific fields.
ENVELOPE_KEYS = ("type", "jobId", "accountId")


class CamelModel(BaseModel):
    """Queue messages and polling responses use camelCase keys."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# =============================================================================
# Queue message payloads (one model per job type)
# =============================================================================

class JobMessage(CamelModel):
    job_id: str = Field(..., min_length=1)
    account_id: str = Field(..., min_length=1)


class BranchScoped(JobMessage):
    branch_id: Optional[str] = None
    branch_name: Optional[str] = None


class ParseUploadPayload(JobMessage):
    type: Literal["parse_upload"] = "parse_upload"
    promo_id: str = Field(..., min_length=1)
    upload_id: str = Field(..., min_length=1)
    s3_key: str = Field(..., min_length=1)
    mapping_id: Optional[str] = None


class BrandBootstrapPayload(JobMessage):
    type: Literal["brand_bootstrap"] = "brand_bootstrap"
    url: str = Field(..., min_length=1, max_length=2048)


class ProductUrlScrapePayload(JobMessage):
    type: Literal["product_url_scrape"] = "product_url_scrape"
    promo_id: str = Field(..., min_length=1)
    item_id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1, max_length=2048)


class RenderPreviewPayload(BranchScoped):
    type: Literal["render_preview"] = "render_preview"
    promo_id: str = Field(..., min_length=1)


class RenderPdfPayload(BranchScoped):
    type: Literal["render_pdf"] = "render_pdf"
    promo_id: str = Field(..., min_length=1)
    watermark: bool


class RenderSocialImagePayload(BranchScoped):
    type: Literal["render_social_image"] = "render_social_image"
    promo_id: str = Field(..., min_length=1)
    watermark: bool


class ExportZipPayload(JobMessage):
    type: Literal["export_zip"] = "export_zip"
    promo_id: str = Field(..., min_length=1)


class GenerateEmailPayload(BranchScoped):
    type: Literal["generate_email"] = "generate_email"
    promo_id: str = Field(..., min_length=1)


class GenerateCoopReportPayload(JobMessage):
    type: Literal["generate_coop_report"] = "generate_coop_report"
    promo_id: str = Field(..., min_length=1)


JobPayload = Annotated[
    Union[
        ParseUploadPayload,
        BrandBootstrapPayload,
        ProductUrlScrapePayload,
        RenderPreviewPayload,
        RenderPdfPayload,
        RenderSocialImagePayload,
        ExportZipPayload,
        GenerateEmailPayload,
        GenerateCoopReportPayload,
    ],
    Field(discriminator="type"),
]

job_payload_adapter: TypeAdapter = TypeAdapter(JobPayload)


def build_message(job_type: str, job_id: str, account_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Queue message body: envelope keys plus the type-specific fields."""
    body = {k: v for k, v in (fields or {}).items() if k not in ENVELOPE_KEYS}
    return {"type": job_type, "jobId": job_id, "accountId": account_id, **body}


def message_fields(payload: BaseModel) -> Dict[str, Any]:
    """Type-specific fields of a validated payload, camelCased, without the envelope."""
    data = payload.model_dump(by_alias=True, exclude_none=True, mode="json")
    return {k: v for k, v in data.items() if k not in ENVELOPE_KEYS}


# =============================================================================
# API schemas
# =============================================================================

class JobCreateRequest(BaseModel):
    type: JobType
    payload: Dict[str, Any] = Field(default_factory=dict, description="Type-specific fields (camelCase).")


class JobCreateResponse(CamelModel):
    job_id: str
    type: JobType
    status: JobStatus


class RenderBundleRequest(CamelModel):
    promo_id: str = Field(..., min_length=1)
    branch_id: Optional[str] = None
    branch_name: Optional[str] = None


class RenderBundleResponse(CamelModel):
    jobs: List[JobCreateResponse]


class JobResponse(CamelModel):
    """Polling contract: clients poll until status is done or failed."""

    id: str
    type: JobType
    status: JobStatus
    result: Optional[Dict[str, Any]] = None
    error_msg: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    attempts: int = 0
