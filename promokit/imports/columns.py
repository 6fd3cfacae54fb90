"""
Column inference for supplier spreadsheets.

Rows arrive as ordered `header -> cell` dicts with uncontrolled header names.
Each canonical field is resolved per row:

1. exact header lookup (case-insensitive) when a mapping profile names a header
   for the field and that cell is non-empty;
2. otherwise smart detection: the candidate tokens are tried in order and the
   first header (in sheet order) containing the token wins.

Token order takes precedence over column order. With headers
`Item Code, Description` the name resolves to "Description" ("description"
outranks "item"), where a header-order scan would pick "Item Code".
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

SMART_TOKENS: Dict[str, List[str]] = {
    "name": ["name", "product", "description", "item", "title"],
    "price": ["price", "cost", "amount", "retail"],
    "sku": ["sku", "item_no", "item#", "code", "part"],
    "unit": ["unit", "uom", "each", "pack"],
    "category": ["category", "dept", "department", "type"],
    "vendor": ["vendor", "brand", "supplier", "manufacturer", "mfr"],
    "image": ["image", "image_url", "photo", "img"],
}

# Fields a mapping profile can pin to a literal header.
MAPPABLE_FIELDS = ("name", "price", "sku", "unit", "category", "vendor")

_PRICE_JUNK_RE = re.compile(r"[\s,$£€]")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def smart_detect(row: Mapping[str, Any], field: str) -> str:
    headers = [(h, str(h).lower()) for h in row.keys()]
    for token in SMART_TOKENS.get(field, []):
        for header, lowered in headers:
            if token in lowered:
                return _cell(row[header])
    return ""


def exact_lookup(row: Mapping[str, Any], header: Optional[str]) -> str:
    wanted = (header or "").strip().lower()
    if not wanted:
        return ""
    for key, value in row.items():
        if str(key).strip().lower() == wanted:
            return _cell(value)
    return ""


def resolve_field(row: Mapping[str, Any], field: str, mapping: Optional[Mapping[str, str]] = None) -> str:
    """Resolved cell text for one canonical field ('' when nothing matches)."""
    if mapping and mapping.get(field):
        value = exact_lookup(row, mapping.get(field))
        if value:
            return value
    return smart_detect(row, field)


def parse_price(value: Any) -> float:
    """Numeric price, 0 when the cell is empty or unparsable."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    else:
        text = _PRICE_JUNK_RE.sub("", _cell(value))
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def infer_items(
    rows: Iterable[Mapping[str, Any]],
    mapping: Optional[Mapping[str, str]] = None,
) -> List[Dict[str, Any]]:
    """
    Normalize spreadsheet rows into promo item records.

    Rows whose resolved name is blank are dropped. `sort_order` keeps the original
    row index, so it can have gaps.
    """
    items: List[Dict[str, Any]] = []
    for index, row in enumerate(rows):
        name = resolve_field(row, "name", mapping)
        if not name:
            continue
        items.append(
            {
                "name": name,
                "price": parse_price(resolve_field(row, "price", mapping)),
                "sku": resolve_field(row, "sku", mapping) or None,
                "unit": resolve_field(row, "unit", mapping) or None,
                "category": resolve_field(row, "category", mapping) or None,
                "vendor": resolve_field(row, "vendor", mapping) or None,
                "image_url": resolve_field(row, "image", mapping) or None,
                "sort_order": index,
            }
        )
    return items
