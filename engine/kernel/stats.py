"""
Vivarium Kernel — Stats Aggregator

Counts and histograms over the whole base collection. Statistics ignore
the current filter and search: the dashboard cards describe the colony,
not the view.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Any

from engine.kernel.fields import FieldAccessor
from engine.kernel.types import FieldTable, Record, StatsSnapshot


def count(collection: Iterable[Record], predicate: Callable[[Record], Any]) -> int:
    return sum(1 for record in collection if predicate(record))


def distinct_count(collection: Iterable[Record], field_name: str, accessor: FieldAccessor) -> int:
    """Cardinality of a field's value set (the absent value counts once)."""
    return len({group_key(accessor.get(record, field_name)) for record in collection})


def total(collection: Iterable[Record], value_of: Callable[[Record], int | float]) -> int | float:
    """Sum `value_of(record)` over the collection."""
    return sum(value_of(record) for record in collection)


def group_by(collection: Iterable[Record], field_name: str, accessor: FieldAccessor) -> dict[Any, list[Record]]:
    """
    Group records by a field's value.

    Groups appear in order of first occurrence; records keep their
    collection order inside each group.
    """
    groups: dict[Any, list[Record]] = {}
    for record in collection:
        groups.setdefault(group_key(accessor.get(record, field_name)), []).append(record)
    return groups


def group_key(value: Any) -> Any:
    """Hashable form of a field value. Lists become tuples, dicts sorted item tuples."""
    if isinstance(value, (list, tuple)):
        return tuple(group_key(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted(((str(k), group_key(v)) for k, v in value.items()), key=lambda item: item[0]))
    if isinstance(value, (set, frozenset)):
        return frozenset(group_key(v) for v in value)
    return value


def histogram(collection: Iterable[Record], field_name: str, accessor: FieldAccessor) -> dict[Any, int]:
    return {value: len(records) for value, records in group_by(collection, field_name, accessor).items()}


def percentage(part: int | float, whole: int | float) -> int:
    """Rounded percentage, 0 for an empty whole."""
    if not whole:
        return 0
    return round(part / whole * 100)


def compute_stats(
    collection: Sequence[Record],
    table: FieldTable,
    now: datetime | None = None,
) -> StatsSnapshot:
    """Evaluate the table's StatDefs and histograms over `collection`."""
    accessor = FieldAccessor(table, now=now)
    snapshot = StatsSnapshot()
    for stat in table.stats:
        snapshot.counts[stat.name] = stat.compute(collection, accessor)
    for field_name in table.histograms:
        snapshot.groups[field_name] = histogram(collection, field_name, accessor)
    return snapshot
