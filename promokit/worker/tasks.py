"""Celery tasks (sync)."""

from __future__ import annotations

import logging
from typing import Dict

from promokit.core.database import get_pymongo_db
from promokit.core.queue import JobQueue
from promokit.jobs import service
from promokit.worker.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="promokit.worker.tasks.requeue_stale_jobs", acks_late=True)
def requeue_stale_jobs() -> Dict[str, int]:
    """Re-send pending jobs whose original enqueue never made it to the jobs queue."""
    try:
        return service.requeue_stale_jobs(get_pymongo_db(), JobQueue())
    except Exception as e:
        logger.error(f"Failed to requeue stale jobs: {e}")
        raise
