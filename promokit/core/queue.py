"""SQS jobs queue client (producer + dispatcher side)."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

from promokit.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class JobQueue:
    """
    Thin wrapper around the SQS jobs queue.

    Message bodies are small JSON objects: `{type, jobId, accountId, ...}`.
    Visibility timeout and the dead-letter redrive policy are configured on the
    queue itself.
    """

    def __init__(self, queue_url: Optional[str] = None, client=None) -> None:
        self.queue_url = (queue_url or settings.JOBS_QUEUE_URL or "").strip()
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "sqs",
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
                region_name=settings.AWS_REGION,
            )
        return self._client

    def _require_url(self) -> str:
        if not self.queue_url:
            raise ValueError("JOBS_QUEUE_URL is not configured.")
        return self.queue_url

    def send(self, body: Dict[str, Any]) -> str:
        """Send one job message; returns the SQS message id."""
        try:
            response = self.client.send_message(
                QueueUrl=self._require_url(),
                MessageBody=json.dumps(body, separators=(",", ":"), ensure_ascii=False),
            )
        except ClientError as e:
            logger.error(f"Failed to enqueue {body.get('type')} / {body.get('jobId')}: {e}")
            raise
        return response.get("MessageId", "")

    def receive(self, max_messages: int, wait_seconds: int) -> List[dict]:
        """Long-poll for up to `max_messages` messages."""
        response = self.client.receive_message(
            QueueUrl=self._require_url(),
            MaxNumberOfMessages=max(1, min(int(max_messages), 10)),
            WaitTimeSeconds=max(0, min(int(wait_seconds), 20)),
        )
        return response.get("Messages") or []

    def delete(self, receipt_handle: str) -> None:
        """Acknowledge a message so it is not redelivered."""
        self.client.delete_message(QueueUrl=self._require_url(), ReceiptHandle=receipt_handle)
