"""
Worker-side datastore access for promos and everything hanging off them.

Collections (snake_case fields, string `_id`s):
- promos: account_id, title, subhead, cta, template_id, status
- promo_items: promo_id, name, price, sku, unit, category, vendor, image_url,
  sort_order, coop_vendor, coop_amount, coop_note
- assets: account_id, promo_id, branch_id, type, s3_key, size_bytes, created_at
- brand_kits: account_id, logo_url, logo_key, colors, website_url
- column_mappings: account_id, name, mapping {field: header}
- uploads: account_id, promo_id, s3_key, parsed_at
- accounts: name, plan
- branches: account_id, name, address, phone, email, cta

The database handle is passed in, so tests can hand over a mongomock database.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database

from promokit.core.exceptions import RecordNotFoundError

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.utcnow()


def new_id() -> str:
    return str(ObjectId())


class PromoStore:
    def __init__(self, db: Database, use_transactions: bool = True) -> None:
        self.db = db
        self.use_transactions = use_transactions

    # ==================== Promos ====================

    def get_promo(self, promo_id: str, account_id: str) -> dict:
        promo = self.db.promos.find_one({"_id": promo_id, "account_id": account_id})
        if not promo:
            raise RecordNotFoundError(f"Promo {promo_id} not found")
        return promo

    def set_promo_status(self, promo_id: str, status: str) -> None:
        self.db.promos.update_one(
            {"_id": promo_id},
            {"$set": {"status": status, "updated_at": _now()}},
        )

    # ==================== Items ====================

    def list_items(self, promo_id: str) -> List[dict]:
        return list(self.db.promo_items.find({"promo_id": promo_id}).sort("sort_order", ASCENDING))

    def list_coop_items(self, promo_id: str) -> List[dict]:
        """Items carrying a co-op vendor, in sort order."""
        return list(
            self.db.promo_items.find({"promo_id": promo_id, "coop_vendor": {"$ne": None}}).sort(
                "sort_order", ASCENDING
            )
        )

    def replace_items(self, promo_id: str, items: List[Dict[str, Any]]) -> int:
        """Delete the promo's items and insert `items` as one all-or-nothing step."""
        now = _now()
        docs = [
            {
                "_id": new_id(),
                "promo_id": promo_id,
                "coop_vendor": None,
                "coop_amount": None,
                "coop_note": None,
                **item,
                "created_at": now,
                "updated_at": now,
            }
            for item in items
        ]

        def apply(session=None) -> None:
            self.db.promo_items.delete_many({"promo_id": promo_id}, session=session)
            if docs:
                self.db.promo_items.insert_many(docs, session=session)

        if self.use_transactions:
            with self.db.client.start_session() as session:
                session.with_transaction(lambda s: apply(s))
        else:
            apply()
        return len(docs)

    def get_item(self, item_id: str, promo_id: str) -> dict:
        item = self.db.promo_items.find_one({"_id": item_id, "promo_id": promo_id})
        if not item:
            raise RecordNotFoundError(f"Item {item_id} not found in promo {promo_id}")
        return item

    def update_item(self, item_id: str, fields: Dict[str, Any]) -> Optional[dict]:
        return self.db.promo_items.find_one_and_update(
            {"_id": item_id},
            {"$set": {**fields, "updated_at": _now()}},
            return_document=ReturnDocument.AFTER,
        )

    # ==================== Assets ====================

    def create_asset(
        self,
        *,
        account_id: str,
        promo_id: str,
        asset_type: str,
        s3_key: str,
        size_bytes: int,
        branch_id: Optional[str] = None,
    ) -> dict:
        doc = {
            "_id": new_id(),
            "account_id": account_id,
            "promo_id": promo_id,
            "branch_id": branch_id,
            "type": asset_type,
            "s3_key": s3_key,
            "size_bytes": size_bytes,
            "created_at": _now(),
        }
        self.db.assets.insert_one(doc)
        return doc

    def list_assets(self, promo_id: str, account_id: str, *, exclude_types: tuple = ("zip",)) -> List[dict]:
        """Oldest first."""
        return list(
            self.db.assets.find(
                {"promo_id": promo_id, "account_id": account_id, "type": {"$nin": list(exclude_types)}}
            ).sort("created_at", ASCENDING)
        )

    # ==================== Brand kit ====================

    def get_brand_kit(self, account_id: str) -> Optional[dict]:
        return self.db.brand_kits.find_one({"account_id": account_id})

    def upsert_brand_kit(self, account_id: str, fields: Dict[str, Any]) -> dict:
        now = _now()
        existing = self.get_brand_kit(account_id)
        if existing is None:
            doc = {"_id": new_id(), "account_id": account_id, "created_at": now, "updated_at": now, **fields}
            self.db.brand_kits.insert_one(doc)
            return doc
        return self.db.brand_kits.find_one_and_update(
            {"_id": existing["_id"]},
            {"$set": {**fields, "updated_at": now}},
            return_document=ReturnDocument.AFTER,
        )

    # ==================== Imports ====================

    def get_mapping(self, mapping_id: str, account_id: str) -> Optional[Dict[str, str]]:
        doc = self.db.column_mappings.find_one({"_id": mapping_id, "account_id": account_id})
        if not doc:
            return None
        return dict(doc.get("mapping") or {})

    def mark_upload_parsed(self, upload_id: str) -> None:
        self.db.uploads.update_one({"_id": upload_id}, {"$set": {"parsed_at": _now()}})

    # ==================== Accounts / branches ====================

    def get_account(self, account_id: str) -> Optional[dict]:
        return self.db.accounts.find_one({"_id": account_id})

    def get_branch(self, branch_id: str, account_id: str) -> Optional[dict]:
        return self.db.branches.find_one({"_id": branch_id, "account_id": account_id})
