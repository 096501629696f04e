"""
Vivarium Kernel — the pure collection view engine.

Components:
  fields     — FieldAccessor: typed, total field lookups per entity kind
  filters    — per-field criteria, AND-combined
  search     — AND-of-substrings over a per-record blob
  sorting    — type-aware comparator with identifier tie-break
  stats      — counts and histograms over the base collection
  selection  — selected ids, trimmed to the visible set
  view       — ViewState + recompute (filter → search → sort)
  export     — CSV and JSON rendering of a record list
  entities   — field tables for animals, cages, tasks, breeding pairs

No IO here. The backend wraps this in a ViewController.
"""

from engine.kernel.entities import ENTITY_TABLES, get_table
from engine.kernel.fields import FieldAccessor
from engine.kernel.filters import filter_records, matches
from engine.kernel.search import blob_matches, build_blob, search_records
from engine.kernel.selection import SelectionSet
from engine.kernel.sorting import compare, sort_records
from engine.kernel.stats import compute_stats
from engine.kernel.types import (
    UNSET,
    BulkAction,
    FieldDef,
    FieldTable,
    FilterSpec,
    JobResult,
    MutationJob,
    SearchSpec,
    SortSpec,
    StatsSnapshot,
)
from engine.kernel.view import ViewState, recompute, refresh

__all__ = [
    "UNSET",
    "BulkAction",
    "FieldAccessor",
    "FieldDef",
    "FieldTable",
    "FilterSpec",
    "JobResult",
    "MutationJob",
    "SearchSpec",
    "SelectionSet",
    "SortSpec",
    "StatsSnapshot",
    "ViewState",
    "ENTITY_TABLES",
    "get_table",
    "matches",
    "filter_records",
    "build_blob",
    "blob_matches",
    "search_records",
    "compare",
    "sort_records",
    "compute_stats",
    "recompute",
    "refresh",
]
