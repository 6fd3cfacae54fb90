"""Dependencies shared by every job handler in a worker process."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import httpx
from pymongo.database import Database

from promokit.ai.copywriter import Copywriter
from promokit.core.aws import S3Service
from promokit.core.config import Settings, get_settings
from promokit.core.database import get_pymongo_db
from promokit.core.http import build_http_client
from promokit.core.queue import JobQueue
from promokit.promos.store import PromoStore
from promokit.render.browser import BrowserRenderer


@dataclass
class WorkerContext:
    """
    Built once at process start and passed to each handler call.

    `storage` is anything with `download_bytes`, `upload_bytes`, `uploads_bucket`
    and `assets_bucket` (S3Service in production).
    """

    db: Database
    storage: object
    http: httpx.Client
    renderer: BrowserRenderer
    copywriter: Copywriter
    settings: Settings = field(default_factory=get_settings)
    queue: Optional[JobQueue] = None
    store: PromoStore = field(init=False)

    def __post_init__(self) -> None:
        self.store = PromoStore(self.db, use_transactions=self.settings.MONGO_USE_TRANSACTIONS)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "WorkerContext":
        settings = settings or get_settings()
        return cls(
            db=get_pymongo_db(),
            storage=S3Service(),
            http=build_http_client(),
            renderer=BrowserRenderer(),
            copywriter=Copywriter(),
            settings=settings,
            queue=JobQueue(),
        )

    def close(self) -> None:
        self.http.close()
