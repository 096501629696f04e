"""
Vivarium Kernel — Shared Types

Data classes used across fields, filters, search, sorting, stats, selection
and the view recompute. These are the contracts that bind the kernel together.

Key points:
- Records are plain dicts. The kernel never mutates one in place.
- `UNSET` is the explicit "not constrained" criterion. Legacy UI values
  ("__all__", "", False) are normalized to it by FilterSpec.from_params.
- Each entity kind describes itself with a FieldTable: accessors, searchable
  fields, default sort, identifier field, stats and bulk actions.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

Record = dict[str, Any]

# ---------------------------------------------------------------------------
# Sentinels and registries
# ---------------------------------------------------------------------------


class _Unset:
    """Marker for a filter criterion that does not constrain its field."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Unset:
        return self

    def __deepcopy__(self, memo: dict) -> _Unset:
        return self


UNSET = _Unset()

# Values the dashboard used to mean "no filter on this field".
LEGACY_UNSET_VALUES: tuple[Any, ...] = ("__all__", "", None, False)

FIELD_KINDS: set[str] = {"text", "number", "date", "bool", "list", "rank", "auto"}

SORT_DIRECTIONS: set[str] = {"asc", "desc"}

BULK_ACTION_TYPES: set[str] = {"delete", "set_fields"}

SETTLEMENT_POLICIES: set[str] = {"all_or_nothing", "settle_all"}

# Earliest representable instant. Absent dates sort here.
EARLIEST = datetime.min.replace(tzinfo=UTC)


# ---------------------------------------------------------------------------
# Field tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldDef:
    """
    One logical field of an entity kind.

    `source` names the record key (defaults to `name`). `derive` computes
    the value from the whole record instead; it receives (record, now).
    `ranks` orders the values of a `rank` field (lower sorts first).
    """

    name: str
    kind: str = "text"
    source: str | None = None
    derive: Callable[[Mapping[str, Any], datetime], Any] | None = None
    ranks: Mapping[str, int] | None = None

    def __post_init__(self) -> None:
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"Unknown field kind: {self.kind}")
        if self.kind == "rank" and not self.ranks:
            raise ValueError(f"Rank field {self.name!r} needs a ranks table")

    @property
    def key(self) -> str:
        return self.source or self.name


@dataclass(frozen=True)
class StatDef:
    """A named scalar statistic computed over a whole collection."""

    name: str
    compute: Callable[[Sequence[Record], Any], int | float]


@dataclass(frozen=True)
class BulkActionDef:
    """A bulk action a view offers, e.g. "set-quarantine"."""

    name: str
    type: str
    fields: Mapping[str, Any] | None = None
    label: str = ""

    def __post_init__(self) -> None:
        if self.type not in BULK_ACTION_TYPES:
            raise ValueError(f"Unknown bulk action type: {self.type}")
        if self.type == "set_fields" and not self.fields:
            raise ValueError(f"Bulk action {self.name!r} needs fields to set")

    def to_action(self) -> BulkAction:
        if self.type == "delete":
            return BulkAction.delete()
        return BulkAction.set_fields(**dict(self.fields or {}))


@dataclass
class SortSpec:
    """The single active sort order."""

    key: str
    direction: str = "asc"

    def __post_init__(self) -> None:
        if self.direction not in SORT_DIRECTIONS:
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got {self.direction!r}")

    @property
    def descending(self) -> bool:
        return self.direction == "desc"

    def reversed(self) -> SortSpec:
        return SortSpec(key=self.key, direction="asc" if self.descending else "desc")

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "direction": self.direction}


@dataclass
class FieldTable:
    """
    Everything the engine needs to know about one entity kind.

    A table that declares no fields is permissive: any field name resolves
    by plain dict lookup and every filter criterion applies.
    """

    kind: str
    id_field: str = "id"
    fields: dict[str, FieldDef] = field(default_factory=dict)
    search_fields: tuple[str, ...] = ()
    default_sort: SortSpec | None = None
    stats: tuple[StatDef, ...] = ()
    histograms: tuple[str, ...] = ()
    actions: dict[str, BulkActionDef] = field(default_factory=dict)

    def knows(self, name: str) -> bool:
        return not self.fields or name in self.fields or name == self.id_field

    def field_def(self, name: str) -> FieldDef:
        fdef = self.fields.get(name)
        if fdef is not None:
            return fdef
        return FieldDef(name=name, kind="auto")


# ---------------------------------------------------------------------------
# View specs
# ---------------------------------------------------------------------------


def is_unset(criterion: Any) -> bool:
    """True when a criterion does not constrain its field."""
    if criterion is UNSET or criterion is False or criterion is None:
        return True
    if isinstance(criterion, (set, frozenset, list, tuple)) and not criterion:
        return True
    return False


@dataclass
class FilterSpec:
    """
    Per-field filter criteria.

    A criterion is UNSET, a concrete value (equality), True (truthiness) or
    a set of allowed values (membership). False and empty sets behave as UNSET.
    """

    criteria: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> FilterSpec:
        """Build a spec from UI parameters, mapping legacy sentinels to UNSET."""
        criteria: dict[str, Any] = {}
        for name, value in params.items():
            if isinstance(value, (list, tuple, set, frozenset)):
                kept = frozenset(v for v in value if not _is_legacy_unset(v))
                criteria[name] = kept if kept else UNSET
            elif _is_legacy_unset(value):
                criteria[name] = UNSET
            else:
                criteria[name] = value
        return cls(criteria=criteria)

    def active(self) -> dict[str, Any]:
        """Criteria that actually constrain, in declaration order."""
        return {name: c for name, c in self.criteria.items() if not is_unset(c)}

    def with_criterion(self, name: str, criterion: Any) -> FilterSpec:
        criteria = dict(self.criteria)
        criteria[name] = criterion
        return FilterSpec(criteria=criteria)

    def without(self, name: str) -> FilterSpec:
        return self.with_criterion(name, UNSET)

    def clear(self) -> None:
        self.criteria.clear()

    def is_empty(self) -> bool:
        return not self.active()


def _is_legacy_unset(value: Any) -> bool:
    return any(value is v or (type(value) is type(v) and value == v) for v in LEGACY_UNSET_VALUES)


@dataclass
class SearchSpec:
    """Free-text query plus the fields that contribute to the searchable blob."""

    query: str = ""
    fields: tuple[str, ...] = ()

    def is_blank(self) -> bool:
        return not self.query.split()


# ---------------------------------------------------------------------------
# Bulk mutations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BulkAction:
    """delete, or set_fields(partial record)."""

    type: str
    fields: Mapping[str, Any] | None = None

    @classmethod
    def delete(cls) -> BulkAction:
        return cls(type="delete")

    @classmethod
    def set_fields(cls, **fields: Any) -> BulkAction:
        if not fields:
            raise ValueError("set_fields requires at least one field")
        return cls(type="set_fields", fields=fields)

    def describe(self) -> str:
        if self.type == "delete":
            return "delete"
        return "set " + ", ".join(f"{k}={v!r}" for k, v in (self.fields or {}).items())


@dataclass
class MutationJob:
    """One bulk action against an ordered list of target identifiers."""

    action: BulkAction
    target_ids: list[Any]

    @classmethod
    def for_selection(cls, action: BulkAction, ids: Iterable[Any]) -> MutationJob:
        return cls(action=action, target_ids=list(ids))


@dataclass
class Outcome:
    """How one target id settled. `record` is None for deletes."""

    target_id: Any
    ok: bool
    record: Record | None = None
    error: str | None = None


@dataclass
class JobResult:
    """
    Result of running a MutationJob.

    `applied` says whether local state changed. Under the all-or-nothing
    policy a single failure leaves `applied` False even though some remote
    calls may have succeeded.
    """

    action: str
    target_ids: list[Any]
    succeeded: list[Any] = field(default_factory=list)
    failed: dict[Any, str] = field(default_factory=dict)
    error: str | None = None
    applied: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "target_ids": list(self.target_ids),
            "succeeded": list(self.succeeded),
            "failed": {str(k): v for k, v in self.failed.items()},
            "error": self.error,
            "applied": self.applied,
            "ok": self.ok,
        }


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass
class StatsSnapshot:
    """Scalar counts plus value histograms over the whole base collection."""

    counts: dict[str, int | float] = field(default_factory=dict)
    groups: dict[str, dict[Any, int]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "counts": dict(self.counts),
            "groups": {name: {str(k): v for k, v in hist.items()} for name, hist in self.groups.items()},
        }


def now_utc() -> datetime:
    """Current UTC time."""
    return datetime.now(UTC)
