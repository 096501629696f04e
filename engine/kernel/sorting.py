"""
Vivarium Kernel — Sort Comparator

Type-aware ordering by one key:
  text    lexicographic, case-sensitive unless case_insensitive is set
  number  numeric
  date    by instant
  rank    by the field's rank table (task priority: critical first)
  bool    False before True
  list    by length
  auto    grouped by type, then natural order

Absent values sort as the kind's minimum. Ties are broken by the record
identifier (ascending, in both directions), so output never depends on
sort stability.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from functools import cmp_to_key
from typing import Any

from engine.kernel.fields import FieldAccessor
from engine.kernel.types import FieldDef, Record, SortSpec


def compare(
    a: Record,
    b: Record,
    spec: SortSpec,
    accessor: FieldAccessor,
    case_insensitive: bool = False,
) -> int:
    """Return -1, 0 or 1 ordering `a` against `b` under `spec`."""
    fdef = accessor.field_def(spec.key)
    ka = sort_key(accessor.get(a, spec.key), fdef, case_insensitive)
    kb = sort_key(accessor.get(b, spec.key), fdef, case_insensitive)
    result = _cmp(ka, kb)
    return -result if spec.descending else result


def sort_records(
    records: Iterable[Record],
    spec: SortSpec | None,
    accessor: FieldAccessor,
    case_insensitive: bool = False,
) -> list[Record]:
    """Return a new list ordered by `spec`, ties broken by identifier."""
    items = list(records)
    if spec is None:
        return items

    def ordering(a: Record, b: Record) -> int:
        result = compare(a, b, spec, accessor, case_insensitive)
        if result:
            return result
        return _cmp(_auto_key(accessor.record_id(a)), _auto_key(accessor.record_id(b)))

    return sorted(items, key=cmp_to_key(ordering))


def sort_key(value: Any, fdef: FieldDef, case_insensitive: bool = False) -> Any:
    """Map an accessed value to something totally ordered within its kind."""
    kind = fdef.kind
    if kind == "text":
        return value.casefold() if case_insensitive else value
    if kind in ("number", "date"):
        return value
    if kind == "bool":
        return int(value)
    if kind == "list":
        return len(value)
    if kind == "rank":
        if value is None:
            return -1
        return fdef.ranks.get(value, len(fdef.ranks))
    return _auto_key(value, case_insensitive)


def _auto_key(value: Any, case_insensitive: bool = False) -> tuple:
    # Undeclared fields can hold anything; order by type bucket first.
    if value is None or value == "":
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, datetime):
        return (2, value.timestamp())
    if isinstance(value, str):
        return (3, value.casefold() if case_insensitive else value)
    if isinstance(value, (list, tuple)):
        return (4, len(value))
    return (5, str(value))


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)
