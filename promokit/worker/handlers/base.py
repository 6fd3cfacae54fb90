"""Handler wrapper that drives the job state machine, plus shared asset helpers."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel

from promokit.core.s3_keys import asset_key
from promokit.jobs.state import complete_job, fail_job, start_job

logger = logging.getLogger(__name__)

Handler = Callable[[Any, Dict[str, Any]], Dict[str, Any]]


def job_handler(payload_model: Type[BaseModel]) -> Callable[[Callable], Handler]:
    """
    Wrap `fn(ctx, payload) -> result` into `handler(ctx, body) -> result`.

    The job is marked running before anything else (payload validation
    included). Exactly one of complete_job/fail_job follows. Failures are
    re-raised so the dispatcher leaves the message on the queue.
    """

    def decorator(fn: Callable[[Any, BaseModel], Dict[str, Any]]) -> Handler:
        @functools.wraps(fn)
        def wrapper(ctx, body: Dict[str, Any]) -> Dict[str, Any]:
            job_id = str(body.get("jobId") or "")
            start_job(ctx.db, job_id)
            try:
                payload = payload_model.model_validate(body)
                result = fn(ctx, payload)
                complete_job(ctx.db, job_id, result)
            except Exception as e:
                fail_job(ctx.db, job_id, e)
                raise
            return result

        wrapper.payload_model = payload_model
        return wrapper

    return decorator


def save_asset(
    ctx,
    payload,
    *,
    asset_type: str,
    segment: str,
    ext: str,
    content_type: str,
    data: bytes,
    branch_id: Optional[str] = None,
) -> str:
    """Upload generated bytes and record the asset row. Returns the object key."""
    key = asset_key(payload.account_id, payload.promo_id, segment, ext, branch_id=branch_id)
    ctx.storage.upload_bytes(ctx.storage.assets_bucket, key, data, content_type)
    ctx.store.create_asset(
        account_id=payload.account_id,
        promo_id=payload.promo_id,
        asset_type=asset_type,
        s3_key=key,
        size_bytes=len(data),
        branch_id=branch_id,
    )
    logger.info(f"Stored {asset_type} asset {key} ({len(data)} bytes)")
    return key
