"""
Job state machine (worker side, sync PyMongo).

pending -> running -> {done | failed}. `running` may recur when an earlier
attempt crashed; done/failed are terminal. Terminal writes only match rows
without `completed_at`, so duplicate deliveries never overwrite a result.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from promokit.jobs.models import JobStatus

logger = logging.getLogger(__name__)

MAX_ERROR_CHARS = 1200


def _now() -> datetime:
    return datetime.utcnow()


def _jobs(db: Database):
    return db["jobs"]


def error_message(exc: BaseException) -> str:
    """Human-readable error text stored on failed jobs."""
    err = str(exc).strip() or type(exc).__name__
    if len(err) > MAX_ERROR_CHARS:
        err = err[:MAX_ERROR_CHARS] + "…"
    return err


def get_job(db: Database, job_id: str) -> Optional[dict]:
    return _jobs(db).find_one({"job_id": job_id})


def start_job(db: Database, job_id: str) -> Optional[dict]:
    """Mark a job running and count the attempt. Returns None for unknown or terminal jobs."""
    now = _now()
    job = _jobs(db).find_one_and_update(
        {"job_id": job_id, "status": {"$in": [JobStatus.pending.value, JobStatus.running.value]}},
        {
            "$set": {"status": JobStatus.running.value, "started_at": now, "updated_at": now},
            "$inc": {"attempts": 1},
        },
        return_document=ReturnDocument.AFTER,
    )
    if job is None:
        logger.warning(f"start_job: job {job_id} not found or already finished")
    return job


def _finish_once(db: Database, job_id: str, fields: Dict[str, Any]) -> bool:
    now = _now()
    res = _jobs(db).update_one(
        {"job_id": job_id, "completed_at": None},
        {"$set": {**fields, "updated_at": now, "completed_at": now}},
    )
    return res.modified_count == 1


def complete_job(db: Database, job_id: str, result: Dict[str, Any]) -> bool:
    """Terminal success. Returns False when the job was already finished."""
    return _finish_once(
        db,
        job_id,
        {"status": JobStatus.done.value, "result": result, "error_msg": None},
    )


def fail_job(db: Database, job_id: str, exc: BaseException) -> bool:
    """Terminal failure with the exception's message."""
    return _finish_once(
        db,
        job_id,
        {"status": JobStatus.failed.value, "error_msg": error_message(exc)},
    )
