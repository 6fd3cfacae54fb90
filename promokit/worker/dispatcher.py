"""
Jobs queue dispatcher (worker process entry point).

    python -m promokit.worker.dispatcher

Long-polls the jobs queue, routes each message to its handler by `type` and
deletes the message only when the handler returns. Messages in a batch are
processed one after another; a failing message never stops the loop.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Mapping, Optional

from botocore.exceptions import BotoCoreError, ClientError

from promokit.core.config import get_settings
from promokit.jobs.models import TERMINAL_STATUSES, JobType
from promokit.jobs.state import fail_job, get_job
from promokit.worker.context import WorkerContext
from promokit.worker.handlers import HANDLERS, Handler

logger = logging.getLogger(__name__)


class UnsupportedJobType(Exception):
    pass


def decode_body(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """JSON object body, or None for poison messages."""
    try:
        body = json.loads(raw or "")
    except (TypeError, ValueError):
        return None
    return body if isinstance(body, dict) else None


class Dispatcher:
    def __init__(self, ctx: WorkerContext, queue=None, handlers: Optional[Mapping[JobType, Handler]] = None):
        self.ctx = ctx
        self.queue = queue if queue is not None else ctx.queue
        self.handlers = dict(handlers if handlers is not None else HANDLERS)
        self._running = False

    def resolve_handler(self, job_type: Any) -> Optional[Handler]:
        try:
            return self.handlers.get(JobType(job_type))
        except ValueError:
            return None

    def process_message(self, message: Dict[str, Any]) -> bool:
        """
        Handle one SQS message. Returns True when the message was acknowledged.

        Handler exceptions are caught here (the handler has already recorded
        the failure) and the message is left for redelivery.
        """
        receipt = message.get("ReceiptHandle")
        body = decode_body(message.get("Body"))
        if body is None:
            logger.warning(f"Dropping undecodable message {message.get('MessageId')}")
            self.queue.delete(receipt)
            return True

        job_type = body.get("type")
        job_id = str(body.get("jobId") or "")
        logger.info(f"Received job type={job_type} jobId={job_id}")

        handler = self.resolve_handler(job_type)
        if handler is None:
            logger.warning(f"Unsupported job type {job_type!r} (jobId={job_id}); dropping message")
            if job_id:
                fail_job(self.ctx.db, job_id, UnsupportedJobType(f"Unsupported job type: {job_type}"))
            self.queue.delete(receipt)
            return True

        job = get_job(self.ctx.db, job_id) if job_id else None
        if job is not None and job.get("status") in TERMINAL_STATUSES:
            logger.info(f"Job {job_id} already {job.get('status')}; acknowledging redelivery")
            self.queue.delete(receipt)
            return True

        try:
            handler(self.ctx, body)
        except Exception:
            logger.exception(f"Job {job_id} ({job_type}) failed; leaving message for redelivery")
            return False

        self.queue.delete(receipt)
        return True

    def poll_once(self) -> int:
        """Receive one batch and process it. Returns the number of messages received."""
        settings = self.ctx.settings
        messages = self.queue.receive(settings.SQS_MAX_MESSAGES, settings.SQS_WAIT_TIME_SECONDS)
        for message in messages:
            try:
                self.process_message(message)
            except (ClientError, BotoCoreError) as e:
                # e.g. delete failed; the message will simply be redelivered.
                logger.error(f"Queue error while processing {message.get('MessageId')}: {e}")
            except Exception:
                logger.exception(f"Error processing message {message.get('MessageId')}; continuing with batch")
        return len(messages)

    def run_forever(self) -> None:
        self._running = True
        logger.info(f"Worker started, polling {self.queue.queue_url}")
        while self._running:
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Poll error: {e}")
                time.sleep(self.ctx.settings.WORKER_ERROR_BACKOFF_SECONDS)

    def stop(self) -> None:
        self._running = False


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ctx = WorkerContext.from_settings(settings)
    try:
        Dispatcher(ctx).run_forever()
    except KeyboardInterrupt:
        logger.info("Worker stopped")
    finally:
        ctx.close()


if __name__ == "__main__":
    main()
