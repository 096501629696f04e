"""
Vivarium Kernel — View Recompute

The visible collection is derived, never stored: base → filter → search →
sort, recomputed in full whenever a spec changes. Filter and search are
independent predicates; sorting runs last on the reduced set.

ViewState is the explicit value the pure functions operate on. The
backend's ViewController is a thin mutable wrapper around one.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from engine.kernel.fields import FieldAccessor
from engine.kernel.filters import filter_records
from engine.kernel.search import search_records
from engine.kernel.selection import SelectionSet
from engine.kernel.sorting import sort_records
from engine.kernel.types import FieldTable, FilterSpec, Record, SearchSpec, SortSpec


@dataclass
class ViewState:
    """Base collection, active specs, derived visible collection, selection."""

    table: FieldTable
    base: list[Record] = field(default_factory=list)
    filter: FilterSpec = field(default_factory=FilterSpec)
    search: SearchSpec = field(default_factory=SearchSpec)
    sort: SortSpec | None = None
    visible: list[Record] = field(default_factory=list)
    selection: SelectionSet = field(default_factory=SelectionSet)
    case_insensitive: bool = False

    def __post_init__(self) -> None:
        if self.sort is None:
            self.sort = self.table.default_sort
        if not self.search.fields:
            self.search = SearchSpec(query=self.search.query, fields=self.table.search_fields)

    @property
    def id_field(self) -> str:
        return self.table.id_field

    def visible_ids(self) -> list[Any]:
        return [r.get(self.id_field) for r in self.visible]

    def base_ids(self) -> list[Any]:
        return [r.get(self.id_field) for r in self.base]


def recompute(
    base: Iterable[Record],
    filter_spec: FilterSpec,
    search_spec: SearchSpec,
    sort_spec: SortSpec | None,
    accessor: FieldAccessor,
    case_insensitive: bool = False,
) -> list[Record]:
    """Derive the visible collection: filter, then search, then sort."""
    filtered = filter_records(base, filter_spec, accessor, case_insensitive)
    searched = search_records(filtered, search_spec, accessor)
    return sort_records(searched, sort_spec, accessor, case_insensitive)


def refresh(state: ViewState, now: datetime | None = None) -> list[Any]:
    """
    Recompute `state.visible` in place and trim the selection to it.
    Returns the ids that fell out of the selection.
    """
    accessor = FieldAccessor(state.table, now=now)
    state.visible = recompute(
        state.base,
        state.filter,
        state.search,
        state.sort,
        accessor,
        state.case_insensitive,
    )
    return state.selection.retain(state.visible_ids())


# ---------------------------------------------------------------------------
# Base collection helpers (return new lists; records are never mutated)
# ---------------------------------------------------------------------------


def find_record(base: Iterable[Record], id_field: str, record_id: Any) -> Record | None:
    for record in base:
        if record.get(id_field) == record_id:
            return record
    return None


def replace_records(base: Iterable[Record], id_field: str, replacements: Mapping[Any, Record]) -> list[Record]:
    """Swap in new versions of records whose id is in `replacements`."""
    return [replacements.get(r.get(id_field), r) for r in base]


def remove_records(base: Iterable[Record], id_field: str, ids: Iterable[Any]) -> list[Record]:
    doomed = set(ids)
    return [r for r in base if r.get(id_field) not in doomed]


def append_record(base: Iterable[Record], record: Record) -> list[Record]:
    return [*base, record]
