"""
Jobs producer (API side, async Motor) and the stale-pending reconciliation sweep.

Creating a job is two steps that are not atomic: insert the job row, then send
the queue message. A failed send marks the row failed right away; a crash
between the two leaves the row pending until `requeue_stale_jobs` re-sends it.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import ValidationError
from pymongo import ASCENDING
from pymongo.database import Database as PyMongoDatabase

from promokit.core.config import get_settings
from promokit.core.database import Database
from promokit.core.exceptions import BadRequestException, NotFoundException
from promokit.core.queue import JobQueue
from promokit.jobs.models import (
    JobStatus,
    JobType,
    build_message,
    job_payload_adapter,
    message_fields,
)

settings = get_settings()
logger = logging.getLogger(__name__)

FREE_PLAN = "free"


def _now() -> datetime:
    return datetime.utcnow()


def _validate_size(fields: Dict[str, Any]) -> None:
    raw = json.dumps(fields, separators=(",", ":"), ensure_ascii=False, default=str).encode("utf-8")
    if len(raw) > int(settings.JOBS_MAX_INPUT_BYTES):
        raise BadRequestException("Job payload too large.")


def validate_payload(job_type: JobType, job_id: str, account_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Validate type-specific fields against the job type's model; returns normalized fields."""
    _validate_size(fields or {})
    try:
        payload = job_payload_adapter.validate_python(
            build_message(job_type.value, job_id, account_id, fields or {})
        )
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ())[1:]) or "payload"
        raise BadRequestException(f"Invalid {job_type.value} payload: {where}: {first.get('msg', 'invalid')}")
    return message_fields(payload)


def new_job_document(job_type: JobType, job_id: str, account_id: str, fields: Dict[str, Any]) -> dict:
    now = _now()
    return {
        "_id": job_id,
        "job_id": job_id,
        "account_id": account_id,
        "type": job_type.value,
        "status": JobStatus.pending.value,
        "payload": fields,
        "result": None,
        "error_msg": None,
        "attempts": 0,
        "created_at": now,
        "updated_at": now,
        "started_at": None,
        "completed_at": None,
        "requeued_at": None,
    }


class JobsService:
    _queue: Optional[JobQueue] = None

    @staticmethod
    def _collection():
        return Database.get_collection("jobs")

    @classmethod
    def queue(cls) -> JobQueue:
        if cls._queue is None:
            cls._queue = JobQueue()
        return cls._queue

    @classmethod
    async def create_job(cls, *, account_id: str, job_type: JobType, fields: Dict[str, Any]) -> dict:
        """Insert a pending job row and enqueue its message."""
        job_id = str(ObjectId())
        normalized = validate_payload(job_type, job_id, account_id, fields)

        doc = new_job_document(job_type, job_id, account_id, normalized)
        await cls._collection().insert_one(doc)

        try:
            cls.queue().send(build_message(job_type.value, job_id, account_id, normalized))
        except Exception as e:
            now = _now()
            await cls._collection().update_one(
                {"job_id": job_id},
                {
                    "$set": {
                        "status": JobStatus.failed.value,
                        "error_msg": f"Failed to enqueue job: {type(e).__name__}",
                        "updated_at": now,
                        "completed_at": now,
                    }
                },
            )
            logger.error(f"Failed to enqueue {job_type.value} job {job_id}: {e}")
            raise BadRequestException("Failed to enqueue job. Check queue configuration.")

        logger.info(f"Enqueued {job_type.value} job {job_id} for account {account_id}")
        return doc

    @classmethod
    async def get_job_for_account(cls, job_id: str, account_id: str) -> dict:
        doc = await cls._collection().find_one({"job_id": job_id, "account_id": account_id})
        if not doc:
            raise NotFoundException("Job not found")
        return doc

    @classmethod
    async def is_watermarked(cls, account_id: str) -> bool:
        account = await Database.get_collection("accounts").find_one({"_id": account_id}, {"plan": 1})
        return ((account or {}).get("plan") or FREE_PLAN) == FREE_PLAN

    @classmethod
    async def create_render_bundle(
        cls,
        *,
        account_id: str,
        promo_id: str,
        branch_id: Optional[str] = None,
        branch_name: Optional[str] = None,
    ) -> List[dict]:
        """Preview, PDF and social image as three independent jobs."""
        promo = await Database.get_collection("promos").find_one({"_id": promo_id, "account_id": account_id})
        if not promo:
            raise NotFoundException("Promo not found")

        watermark = await cls.is_watermarked(account_id)
        base: Dict[str, Any] = {"promoId": promo_id}
        if branch_id:
            base["branchId"] = branch_id
        if branch_name:
            base["branchName"] = branch_name

        jobs = []
        for job_type, extra in (
            (JobType.render_preview, {}),
            (JobType.render_pdf, {"watermark": watermark}),
            (JobType.render_social_image, {"watermark": watermark}),
        ):
            jobs.append(await cls.create_job(account_id=account_id, job_type=job_type, fields={**base, **extra}))
        return jobs


def requeue_stale_jobs(
    db: PyMongoDatabase,
    queue: JobQueue,
    older_than_minutes: Optional[int] = None,
    limit: Optional[int] = None,
) -> Dict[str, int]:
    """
    Re-send messages for jobs stuck at pending (row written, enqueue lost).

    `updated_at` is bumped on every re-send, so a job goes out at most once per
    window. Returns counts for logging.
    """
    minutes = older_than_minutes if older_than_minutes is not None else settings.STALE_PENDING_MINUTES
    batch = limit if limit is not None else settings.RECONCILE_BATCH_SIZE
    cutoff = _now() - timedelta(minutes=int(minutes))

    jobs = db["jobs"]
    stale = list(
        jobs.find({"status": JobStatus.pending.value, "updated_at": {"$lt": cutoff}})
        .sort("updated_at", ASCENDING)
        .limit(int(batch))
    )

    stats = {"found": len(stale), "requeued": 0, "failed": 0}
    for job in stale:
        job_id = job["job_id"]
        body = build_message(job["type"], job_id, job["account_id"], job.get("payload") or {})
        try:
            queue.send(body)
        except Exception as e:
            stats["failed"] += 1
            logger.error(f"Requeue failed for job {job_id}: {e}")
            continue
        now = _now()
        jobs.update_one(
            {"job_id": job_id, "status": JobStatus.pending.value},
            {"$set": {"requeued_at": now, "updated_at": now}},
        )
        stats["requeued"] += 1

    if stale:
        logger.info(f"Requeued stale pending jobs: {stats}")
    return stats
