"""
Vivarium Kernel — Filter Engine

A record passes a FilterSpec when every active criterion holds (logical AND).

Criterion semantics:
  UNSET / False / empty set   → no constraint
  True                        → accessed value must be truthy
  set of values               → accessed value must be a member
  any other value             → accessed value must equal it

List fields (experiments, labels) match a scalar criterion by membership.
A criterion on a field the table does not declare is ignored.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from engine.kernel.fields import FieldAccessor, parse_date
from engine.kernel.types import FilterSpec, Record, is_unset


def matches(
    record: Record,
    spec: FilterSpec,
    accessor: FieldAccessor,
    case_insensitive: bool = False,
) -> bool:
    """Evaluate every active criterion of `spec` against `record`."""
    for name, criterion in spec.criteria.items():
        if is_unset(criterion) or not accessor.knows(name):
            continue
        value = accessor.get(record, name)
        if not criterion_matches(value, criterion, case_insensitive):
            return False
    return True


def filter_records(
    records: Iterable[Record],
    spec: FilterSpec,
    accessor: FieldAccessor,
    case_insensitive: bool = False,
) -> list[Record]:
    """Keep the records that pass `spec`, preserving order."""
    if spec.is_empty():
        return list(records)
    return [r for r in records if matches(r, spec, accessor, case_insensitive)]


def criterion_matches(value: Any, criterion: Any, case_insensitive: bool = False) -> bool:
    if criterion is True:
        return bool(value)

    if isinstance(criterion, (set, frozenset, list, tuple)):
        allowed = {_fold(c, case_insensitive) for c in criterion}
        if isinstance(value, tuple):
            return any(_fold(v, case_insensitive) in allowed for v in value)
        return _fold(value, case_insensitive) in allowed

    if isinstance(value, tuple):
        return any(_equal(v, criterion, case_insensitive) for v in value)
    return _equal(value, criterion, case_insensitive)


def _equal(value: Any, criterion: Any, case_insensitive: bool) -> bool:
    if isinstance(criterion, datetime) or isinstance(value, datetime):
        return parse_date(value) == parse_date(criterion)
    return _fold(value, case_insensitive) == _fold(criterion, case_insensitive)


def _fold(value: Any, case_insensitive: bool) -> Any:
    if case_insensitive and isinstance(value, str):
        return value.casefold()
    return value
