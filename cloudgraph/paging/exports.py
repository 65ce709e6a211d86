"""CSV export of retrieved records."""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO


def collect_columns(records: Iterable[dict[str, Any]]) -> list[str]:
    """Union of top-level keys, in first-seen order."""
    columns: dict[str, None] = {}
    for record in records:
        for key in record:
            columns.setdefault(key, None)
    return list(columns)


def _cell(value: Any) -> Any:
    # Nested objects and lists don't fit a CSV cell; keep them as JSON
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, sort_keys=True)
    if value is None:
        return ""
    return value


def write_csv(records: list[dict[str, Any]], out: TextIO) -> int:
    """Write records as CSV to an open text stream.

    Returns:
        Number of data rows written
    """
    columns = collect_columns(records)
    writer = csv.DictWriter(out, fieldnames=columns, extrasaction="ignore")
    writer.writeheader()
    for record in records:
        writer.writerow({k: _cell(record.get(k)) for k in columns})
    return len(records)


def export_csv(records: list[dict[str, Any]], path: str | Path) -> int:
    """Write records to a CSV file (UTF-8, overwritten if present)."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        return write_csv(records, f)
