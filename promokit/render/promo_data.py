"""TemplatePromoData: the fully-resolved view of a promo handed to templates."""

from __future__ import annotations

import math
from typing import Any, List, Optional

from pydantic import BaseModel

from promokit.promos.store import PromoStore

DEFAULT_PRIMARY_COLOR = "#1a1a2e"
DEFAULT_SECONDARY_COLOR = "#e94560"
DEFAULT_COMPANY_NAME = "My Company"


class TemplatePromo(BaseModel):
    id: str
    title: str
    subhead: Optional[str] = None
    cta: Optional[str] = None
    template_id: Optional[str] = None


class TemplateItem(BaseModel):
    name: str
    price: str
    sku: Optional[str] = None
    unit: Optional[str] = None
    category: Optional[str] = None
    vendor: Optional[str] = None
    image_url: Optional[str] = None


class TemplateBrand(BaseModel):
    logo_url: Optional[str] = None
    primary_color: str = DEFAULT_PRIMARY_COLOR
    secondary_color: str = DEFAULT_SECONDARY_COLOR
    name: str = DEFAULT_COMPANY_NAME


class TemplateBranch(BaseModel):
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    cta: Optional[str] = None


class TemplatePromoData(BaseModel):
    promo: TemplatePromo
    items: List[TemplateItem] = []
    brand: TemplateBrand = TemplateBrand()
    branch: Optional[TemplateBranch] = None
    watermark: bool = False


def format_price(value: Any) -> str:
    """`$N.NN`; anything non-numeric renders as $0.00."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "$0.00"
    if math.isnan(number) or math.isinf(number):
        return "$0.00"
    return f"${number:.2f}"


def load_template_data(
    store: PromoStore,
    promo_id: str,
    account_id: str,
    watermark: bool,
    branch_id: Optional[str] = None,
    branch_name: Optional[str] = None,
) -> TemplatePromoData:
    """Build the render view for a promo; raises RecordNotFoundError for unknown promos."""
    promo = store.get_promo(promo_id, account_id)
    items = store.list_items(promo_id)
    brand_kit = store.get_brand_kit(account_id) or {}
    account = store.get_account(account_id) or {}
    branch = store.get_branch(branch_id, account_id) if branch_id else None

    colors = brand_kit.get("colors") or []
    brand = TemplateBrand(
        logo_url=brand_kit.get("logo_url"),
        primary_color=colors[0] if len(colors) > 0 else DEFAULT_PRIMARY_COLOR,
        secondary_color=colors[1] if len(colors) > 1 else DEFAULT_SECONDARY_COLOR,
        name=account.get("name") or DEFAULT_COMPANY_NAME,
    )

    template_branch = None
    if branch:
        template_branch = TemplateBranch(
            name=branch_name or branch.get("name") or "",
            address=branch.get("address"),
            phone=branch.get("phone"),
            email=branch.get("email"),
            cta=branch.get("cta"),
        )

    return TemplatePromoData(
        promo=TemplatePromo(
            id=str(promo["_id"]),
            title=promo.get("title") or "",
            subhead=promo.get("subhead"),
            cta=promo.get("cta") or (branch or {}).get("cta"),
            template_id=promo.get("template_id"),
        ),
        items=[
            TemplateItem(
                name=item.get("name") or "",
                price=format_price(item.get("price")),
                sku=item.get("sku"),
                unit=item.get("unit"),
                category=item.get("category"),
                vendor=item.get("vendor"),
                image_url=item.get("image_url"),
            )
            for item in items
        ],
        brand=brand,
        branch=template_branch,
        watermark=watermark,
    )
