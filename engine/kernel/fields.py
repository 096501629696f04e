"""
Vivarium Kernel — Field Access

Resolves a named logical field on a record to a comparable value.
`get` is total: a missing or malformed field yields the kind's empty value
("" / 0 / EARLIEST / False / ()), never an exception.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

from engine.kernel.types import EARLIEST, FieldDef, FieldTable, now_utc

_EMPTY: dict[str, Any] = {
    "text": "",
    "number": 0,
    "date": EARLIEST,
    "bool": False,
    "list": (),
    "rank": None,
    "auto": None,
}


class FieldAccessor:
    """Field lookups for one entity kind, evaluated at a fixed `now`."""

    def __init__(self, table: FieldTable, now: datetime | None = None):
        self.table = table
        self.now = now or now_utc()

    def get(self, record: Mapping[str, Any], name: str) -> Any:
        """Return the typed value of `name` on `record`."""
        return coerce(self.raw(record, name), self.table.field_def(name))

    def raw(self, record: Mapping[str, Any], name: str) -> Any:
        """Return the uncoerced value (None when absent)."""
        fdef = self.table.field_def(name)
        if fdef.derive is not None:
            return fdef.derive(record, self.now)
        return record.get(fdef.key)

    def record_id(self, record: Mapping[str, Any]) -> Any:
        return record.get(self.table.id_field)

    def knows(self, name: str) -> bool:
        return self.table.knows(name)

    def field_def(self, name: str) -> FieldDef:
        return self.table.field_def(name)


def coerce(raw: Any, fdef: FieldDef) -> Any:
    """Coerce a raw record value to the field's kind."""
    if raw is None:
        return _EMPTY[fdef.kind]

    kind = fdef.kind
    if kind == "text":
        return raw if isinstance(raw, str) else str(raw)
    if kind == "number":
        if isinstance(raw, bool):
            return int(raw)
        if isinstance(raw, (int, float)):
            return raw
        try:
            return float(raw)
        except (TypeError, ValueError):
            return 0
    if kind == "date":
        parsed = parse_date(raw)
        return parsed if parsed is not None else EARLIEST
    if kind == "bool":
        return bool(raw)
    if kind == "list":
        if isinstance(raw, (list, tuple)):
            return tuple(raw)
        if isinstance(raw, str):
            return (raw,) if raw else ()
        return ()
    # rank and auto keep the raw value
    return raw


def parse_date(value: Any) -> datetime | None:
    """
    Parse a datetime, date, or ISO-8601 string into an aware UTC datetime.
    Returns None when the value cannot be read as a date.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def text_of(value: Any) -> str:
    """String form of a value for the search blob. Sequences are space-joined."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(text_of(v) for v in value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
