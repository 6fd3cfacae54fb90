import os

# Settings are cached at import time; pin test values before promokit is imported.
os.environ.setdefault("MONGO_USE_TRANSACTIONS", "false")
os.environ.setdefault("S3_UPLOADS_BUCKET", "promokit-uploads")
os.environ.setdefault("S3_ASSETS_BUCKET", "promokit-assets")
os.environ.setdefault("JOBS_QUEUE_URL", "https://sqs.eu-west-2.amazonaws.com/123456789012/promokit-jobs")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ["OPENAI_API_KEY"] = ""

import json
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from unittest.mock import Mock

import httpx
import mongomock
import pytest

from promokit.ai.copywriter import Copywriter
from promokit.core.config import get_settings
from promokit.worker.context import WorkerContext


class FakeStorage:
    """In-memory stand-in for S3Service."""

    uploads_bucket = "promokit-uploads"
    assets_bucket = "promokit-assets"

    def __init__(self):
        self.objects: Dict[Tuple[str, str], bytes] = {}
        self.content_types: Dict[Tuple[str, str], str] = {}

    def put(self, bucket: str, key: str, data: bytes) -> None:
        self.objects[(bucket, key)] = data

    def download_bytes(self, bucket: str, key: str) -> bytes:
        if (bucket, key) not in self.objects:
            raise KeyError(f"s3://{bucket}/{key}")
        return self.objects[(bucket, key)]

    def upload_bytes(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        self.objects[(bucket, key)] = data
        self.content_types[(bucket, key)] = content_type

    def keys(self, bucket: str) -> List[str]:
        return [k for (b, k) in self.objects if b == bucket]


class FakeQueue:
    """In-memory stand-in for JobQueue."""

    queue_url = "fake://jobs"

    def __init__(self):
        self.sent: List[dict] = []
        self.inbox: List[dict] = []
        self.deleted: List[str] = []
        self.fail_sends = False

    def send(self, body: dict) -> str:
        if self.fail_sends:
            raise RuntimeError("queue unavailable")
        self.sent.append(body)
        return f"msg-{len(self.sent)}"

    def receive(self, max_messages: int, wait_seconds: int) -> List[dict]:
        batch, self.inbox = self.inbox[:max_messages], self.inbox[max_messages:]
        return batch

    def delete(self, receipt_handle: str) -> None:
        self.deleted.append(receipt_handle)


def make_http_client(routes: Dict[Tuple[str, str], httpx.Response]) -> httpx.Client:
    """httpx client answering from a `(METHOD, url) -> Response` table; anything else is 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get((request.method, str(request.url)))
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        return route

    return httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def db():
    return mongomock.MongoClient().promokit


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def queue():
    return FakeQueue()


@pytest.fixture
def http_routes() -> Dict[Tuple[str, str], httpx.Response]:
    return {}


@pytest.fixture
def http_client(http_routes):
    client = make_http_client(http_routes)
    yield client
    client.close()


@pytest.fixture
def renderer():
    fake = Mock()
    fake.render_preview.return_value = b"\x89PNG-preview"
    fake.render_social_image.return_value = b"\x89PNG-social"
    fake.render_pdf.return_value = b"%PDF-1.7 flyer"
    return fake


@pytest.fixture
def copywriter():
    return Copywriter(api_key="")


@pytest.fixture
def ctx(db, storage, http_client, renderer, copywriter, queue, settings):
    return WorkerContext(
        db=db,
        storage=storage,
        http=http_client,
        renderer=renderer,
        copywriter=copywriter,
        settings=settings,
        queue=queue,
    )


@pytest.fixture
def account(db):
    doc = {"_id": "acct-1", "name": "Acme Building Supply", "plan": "free"}
    db.accounts.insert_one(doc)
    return doc


@pytest.fixture
def promo(db, account):
    doc = {
        "_id": "promo-1",
        "account_id": account["_id"],
        "title": "Spring Lumber Sale",
        "subhead": "This week only",
        "cta": None,
        "template_id": "modern",
        "status": "draft",
    }
    db.promos.insert_one(doc)
    return doc


@pytest.fixture
def promo_items(db, promo):
    items = [
        {
            "_id": "item-1",
            "promo_id": promo["_id"],
            "name": "2x4 Stud 8ft",
            "price": 4.5,
            "sku": "LUM-248",
            "unit": "each",
            "sort_order": 0,
            "coop_vendor": "Boise Cascade",
            "coop_amount": 0.45,
            "coop_note": "Spring, co-op",
        },
        {
            "_id": "item-2",
            "promo_id": promo["_id"],
            "name": "Deck Screws",
            "price": 29.99,
            "sku": "FST-100",
            "unit": "box",
            "sort_order": 1,
            "coop_vendor": None,
            "coop_amount": None,
            "coop_note": None,
        },
    ]
    db.promo_items.insert_many(items)
    return items


def seed_job(db, job_id: str, job_type: str, account_id: str = "acct-1", status: str = "pending", **extra) -> dict:
    now = datetime.utcnow()
    doc = {
        "_id": job_id,
        "job_id": job_id,
        "account_id": account_id,
        "type": job_type,
        "status": status,
        "payload": {},
        "result": None,
        "error_msg": None,
        "attempts": 0,
        "created_at": now,
        "updated_at": now,
        "started_at": None,
        "completed_at": None,
        "requeued_at": None,
    }
    doc.update(extra)
    db.jobs.insert_one(doc)
    return doc


def sqs_message(body, receipt: str = "rh-1", message_id: Optional[str] = None) -> dict:
    raw = body if isinstance(body, str) else json.dumps(body)
    return {"MessageId": message_id or f"mid-{receipt}", "ReceiptHandle": receipt, "Body": raw}
