#!/usr/bin/env python3
"""
Re-send queue messages for jobs stuck at `pending`, for cron jobs and manual runs.

The same sweep runs every 10 minutes from Celery beat.

Usage:
    # Default window (STALE_PENDING_MINUTES) and batch size
    python -m scripts.requeue_stale_jobs

    # Custom window and batch size
    python -m scripts.requeue_stale_jobs --older-than 30 --limit 500

    # Only report what would be re-sent
    python -m scripts.requeue_stale_jobs --dry-run

Exit codes:
    0 - Success (nothing stale, or every stale job re-sent)
    1 - Partial failure (some sends failed)
    2 - Complete failure or invalid arguments
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timedelta

# Make the promokit package importable when run from scripts/ or repo root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from promokit.core.config import get_settings
from promokit.core.database import get_pymongo_db
from promokit.core.queue import JobQueue
from promokit.jobs.service import requeue_stale_jobs


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Re-send stale pending jobs to the jobs queue",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--older-than",
        type=int,
        default=settings.STALE_PENDING_MINUTES,
        help="Minutes since the job row was last touched (default: %(default)s)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=settings.RECONCILE_BATCH_SIZE,
        help="Maximum jobs to re-send in this run (default: %(default)s)",
    )
    parser.add_argument("--dry-run", action="store_true", help="List stale jobs without sending")
    args = parser.parse_args()

    if args.older_than < 1 or args.limit < 1:
        logger.error("--older-than and --limit must be positive")
        sys.exit(2)

    db = get_pymongo_db()

    if args.dry_run:
        cutoff = datetime.utcnow() - timedelta(minutes=args.older_than)
        stale = db["jobs"].find(
            {"status": "pending", "updated_at": {"$lt": cutoff}},
            {"job_id": 1, "type": 1, "updated_at": 1},
        ).limit(args.limit)
        count = 0
        for job in stale:
            count += 1
            logger.info(f"Stale: {job['job_id']} {job['type']} (updated {job['updated_at'].isoformat()})")
        logger.info(f"{count} stale pending jobs")
        sys.exit(0)

    try:
        stats = requeue_stale_jobs(db, JobQueue(), older_than_minutes=args.older_than, limit=args.limit)
    except Exception as e:
        logger.error(f"Requeue sweep failed: {e}")
        sys.exit(2)

    logger.info(f"Requeue complete: {stats}")
    if stats["failed"] and stats["requeued"]:
        sys.exit(1)
    if stats["failed"]:
        sys.exit(2)
    sys.exit(0)


if __name__ == "__main__":
    main()
