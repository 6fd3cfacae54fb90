"""Jobs API endpoints: create, render bundle, poll."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from promokit.core.dependencies import get_current_account
from promokit.jobs.models import (
    JobCreateRequest,
    JobCreateResponse,
    JobResponse,
    RenderBundleRequest,
    RenderBundleResponse,
)
from promokit.jobs.service import JobsService

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def _created(doc: dict) -> JobCreateResponse:
    return JobCreateResponse(job_id=doc["job_id"], type=doc["type"], status=doc["status"])


@router.post("", response_model=JobCreateResponse, status_code=202)
async def create_job(
    body: JobCreateRequest,
    current: dict = Depends(get_current_account),
):
    doc = await JobsService.create_job(
        account_id=current["account_id"],
        job_type=body.type,
        fields=body.payload,
    )
    return _created(doc)


@router.post("/render-bundle", response_model=RenderBundleResponse, status_code=202)
async def create_render_bundle(
    body: RenderBundleRequest,
    current: dict = Depends(get_current_account),
):
    docs = await JobsService.create_render_bundle(
        account_id=current["account_id"],
        promo_id=body.promo_id,
        branch_id=body.branch_id,
        branch_name=body.branch_name,
    )
    return RenderBundleResponse(jobs=[_created(doc) for doc in docs])


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str = Path(..., description="Job ID"),
    current: dict = Depends(get_current_account),
):
    doc = await JobsService.get_job_for_account(job_id, current["account_id"])
    return JobResponse(
        id=doc["job_id"],
        type=doc["type"],
        status=doc["status"],
        result=doc.get("result"),
        error_msg=doc.get("error_msg"),
        started_at=doc.get("started_at"),
        completed_at=doc.get("completed_at"),
        attempts=int(doc.get("attempts") or 0),
    )
