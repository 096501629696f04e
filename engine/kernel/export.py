"""Export a set of records as CSV or JSON text."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from engine.kernel.types import Record

EXPORT_FORMATS: set[str] = {"csv", "json"}


def export_records(records: Sequence[Record], fmt: str, columns: Sequence[str] | None = None) -> str:
    """Render `records` in `fmt` ("csv" or "json")."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    if fmt == "json":
        return json.dumps(list(records), default=_json_default, indent=2)
    return to_csv(records, columns)


def to_csv(records: Sequence[Record], columns: Sequence[str] | None = None) -> str:
    cols = list(columns) if columns else _columns(records)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(cols)
    for record in records:
        writer.writerow([_cell(record.get(c)) for c in cols])
    return buf.getvalue()


def _columns(records: Sequence[Record]) -> list[str]:
    # Union of keys in first-seen order
    seen: dict[str, None] = {}
    for record in records:
        for key in record:
            seen.setdefault(key, None)
    return list(seen)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "; ".join(_cell(v) for v in value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)
