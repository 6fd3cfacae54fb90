"""Read uploaded CSV/XLSX files into header -> cell rows."""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from typing import Any, Dict, List

from openpyxl import load_workbook

from promokit.core.exceptions import UnsupportedSpreadsheetError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def read_csv(data: bytes) -> List[Row]:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise UnsupportedSpreadsheetError("CSV upload is not valid UTF-8.") from e
    reader = csv.DictReader(io.StringIO(text))
    rows = []
    for raw in reader:
        # Short rows leave None for missing cells; extra cells land under a None key.
        rows.append({k: (v if v is not None else "") for k, v in raw.items() if k is not None})
    return rows


def read_xlsx(data: bytes) -> List[Row]:
    """First worksheet; first row holds the headers; empty cells become ''."""
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
        raise UnsupportedSpreadsheetError(f"Could not read spreadsheet: {e}") from e

    try:
        sheet = workbook.worksheets[0]
        values = sheet.iter_rows(values_only=True)
        header_row = next(values, None)
        if not header_row:
            return []

        headers = []
        for i, cell in enumerate(header_row):
            header = "" if cell is None else str(cell).strip()
            headers.append(header or f"__EMPTY_{i}")

        rows: List[Row] = []
        for raw in values:
            if raw is None or all(cell is None or str(cell).strip() == "" for cell in raw):
                continue
            row: Row = {}
            for i, header in enumerate(headers):
                cell = raw[i] if i < len(raw) else None
                row[header] = "" if cell is None else cell
            rows.append(row)
        return rows
    finally:
        workbook.close()


def read_rows(key: str, data: bytes) -> List[Row]:
    """Dispatch on the upload key's extension: `.csv` is CSV, anything else XLSX."""
    if key.lower().endswith(".csv"):
        rows = read_csv(data)
    else:
        rows = read_xlsx(data)
    logger.info(f"Read {len(rows)} rows from {key}")
    return rows
