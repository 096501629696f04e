"""
Vivarium Kernel — Entity Field Tables

One table per dashboard view. Each supplies its field accessors, searchable
fields, default sort, stats cards and bulk actions; the engine itself is
shared.

Logical field names are snake_case. `source` maps them to the camelCase
keys the REST service returns.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from engine.kernel.fields import parse_date
from engine.kernel.stats import count, distinct_count, percentage, total
from engine.kernel.types import BulkActionDef, FieldDef, FieldTable, SortSpec, StatDef

ANIMAL_STATUSES = ("active", "inactive", "quarantine", "deceased")
HEALTH_STATUSES = ("excellent", "good", "fair", "poor")
CAGE_TYPES = ("standard", "breeding", "quarantine", "isolation", "custom")
CAGE_STATUSES = ("available", "occupied", "maintenance", "quarantine")
TASK_STATUSES = ("pending", "in-progress", "review", "completed")
TASK_PRIORITY_RANKS: dict[str, int] = {"critical": 0, "high": 1, "medium": 2, "low": 3}


# ---------------------------------------------------------------------------
# Derived fields
# ---------------------------------------------------------------------------


def _is_before_now(value: Any, now: datetime) -> bool:
    parsed = parse_date(value)
    return parsed is not None and parsed < now


def _has_experiments(record: Mapping[str, Any], now: datetime) -> bool:
    return bool(record.get("experiments"))


def _needs_health_check(record: Mapping[str, Any], now: datetime) -> bool:
    return _is_before_now(record.get("nextHealthCheck"), now)


def _is_active(record: Mapping[str, Any], now: datetime) -> bool:
    return record.get("status") == "active"


def _created(record: Mapping[str, Any], now: datetime) -> Any:
    return record.get("createdAt") or record.get("dateOfBirth")


def _has_space(record: Mapping[str, Any], now: datetime) -> bool:
    return (record.get("currentOccupancy") or 0) < (record.get("capacity") or 0)


def _occupancy_pct(record: Mapping[str, Any], now: datetime) -> int:
    return percentage(record.get("currentOccupancy") or 0, record.get("capacity") or 0)


def _is_available(record: Mapping[str, Any], now: datetime) -> bool:
    return record.get("status") == "available" and _has_space(record, now)


def _overdue(record: Mapping[str, Any], now: datetime) -> bool:
    return record.get("status") != "completed" and _is_before_now(record.get("dueDate"), now)


def _due_today(record: Mapping[str, Any], now: datetime) -> bool:
    parsed = parse_date(record.get("dueDate"))
    return parsed is not None and parsed.astimezone(now.tzinfo).date() == now.date()


def _due_this_week(record: Mapping[str, Any], now: datetime) -> bool:
    parsed = parse_date(record.get("dueDate"))
    return parsed is not None and now <= parsed <= now + timedelta(days=7)


def _upcoming(record: Mapping[str, Any], now: datetime) -> bool:
    parsed = parse_date(record.get("expectedDelivery"))
    return parsed is not None and parsed > now


def _equals(name: str, value: Any):
    return lambda records, acc: count(records, lambda r: acc.get(r, name) == value)


def _flag(name: str):
    return lambda records, acc: count(records, lambda r: acc.get(r, name))


# ---------------------------------------------------------------------------
# Animals
# ---------------------------------------------------------------------------

ANIMALS = FieldTable(
    kind="animals",
    id_field="_id",
    fields={
        "_id": FieldDef("_id", "auto"),
        "name": FieldDef("name"),
        "species": FieldDef("species"),
        "strain": FieldDef("strain"),
        "gender": FieldDef("gender"),
        "status": FieldDef("status"),
        "health_status": FieldDef("health_status", source="healthStatus"),
        "location": FieldDef("location"),
        "notes": FieldDef("notes"),
        "age": FieldDef("age", "number"),
        "weight": FieldDef("weight", "number"),
        "date_of_birth": FieldDef("date_of_birth", "date", source="dateOfBirth"),
        "next_health_check": FieldDef("next_health_check", "date", source="nextHealthCheck"),
        "created": FieldDef("created", "date", derive=_created),
        "experiments": FieldDef("experiments", "list"),
        "has_experiments": FieldDef("has_experiments", "bool", derive=_has_experiments),
        "needs_health_check": FieldDef("needs_health_check", "bool", derive=_needs_health_check),
        "is_active": FieldDef("is_active", "bool", derive=_is_active),
    },
    search_fields=("name", "species", "strain", "location", "notes", "experiments"),
    default_sort=SortSpec("name", "asc"),
    stats=(
        StatDef("total", lambda records, acc: len(records)),
        StatDef("active", _equals("status", "active")),
        StatDef("quarantine", _equals("status", "quarantine")),
        StatDef("species_count", lambda records, acc: distinct_count(records, "species", acc)),
        StatDef("experiments_count", lambda records, acc: total(records, lambda r: len(acc.get(r, "experiments")))),
        StatDef("needs_health_check", _flag("needs_health_check")),
    ),
    histograms=("species", "status"),
    actions={
        "delete": BulkActionDef("delete", "delete", label="Delete selected"),
        "set-quarantine": BulkActionDef("set-quarantine", "set_fields", {"status": "quarantine"}, "Move to quarantine"),
        "set-active": BulkActionDef("set-active", "set_fields", {"status": "active"}, "Mark active"),
    },
)


# ---------------------------------------------------------------------------
# Cages
# ---------------------------------------------------------------------------

CAGES = FieldTable(
    kind="cages",
    id_field="_id",
    fields={
        "_id": FieldDef("_id", "auto"),
        "name": FieldDef("name"),
        "type": FieldDef("type"),
        "status": FieldDef("status"),
        "location": FieldDef("location"),
        "notes": FieldDef("notes"),
        "capacity": FieldDef("capacity", "number"),
        "current_occupancy": FieldDef("current_occupancy", "number", source="currentOccupancy"),
        "occupancy_pct": FieldDef("occupancy_pct", "number", derive=_occupancy_pct),
        "has_space": FieldDef("has_space", "bool", derive=_has_space),
        "is_available": FieldDef("is_available", "bool", derive=_is_available),
    },
    search_fields=("name", "location"),
    default_sort=SortSpec("name", "asc"),
    stats=(
        StatDef("total", lambda records, acc: len(records)),
        StatDef("available", _equals("status", "available")),
        StatDef("occupied", _equals("status", "occupied")),
        StatDef(
            "occupancy_rate",
            lambda records, acc: percentage(count(records, lambda r: acc.get(r, "status") == "occupied"), len(records)),
        ),
    ),
    histograms=("type", "status"),
    actions={
        "delete": BulkActionDef("delete", "delete", label="Delete selected"),
        "set-available": BulkActionDef("set-available", "set_fields", {"status": "available"}, "Mark available"),
        "set-maintenance": BulkActionDef("set-maintenance", "set_fields", {"status": "maintenance"}, "Send to maintenance"),
    },
)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

_TASK_ACTIONS: dict[str, BulkActionDef] = {
    "delete": BulkActionDef("delete", "delete", label="Delete selected"),
}
for _status in TASK_STATUSES:
    _TASK_ACTIONS[f"set-status-{_status}"] = BulkActionDef(
        f"set-status-{_status}", "set_fields", {"status": _status}, f"Set status: {_status}"
    )
for _priority in TASK_PRIORITY_RANKS:
    _TASK_ACTIONS[f"set-priority-{_priority}"] = BulkActionDef(
        f"set-priority-{_priority}", "set_fields", {"priority": _priority}, f"Set priority: {_priority}"
    )

TASKS = FieldTable(
    kind="tasks",
    id_field="id",
    fields={
        "id": FieldDef("id", "auto"),
        "title": FieldDef("title"),
        "description": FieldDef("description"),
        "status": FieldDef("status"),
        "priority": FieldDef("priority", "rank", ranks=TASK_PRIORITY_RANKS),
        "assignee": FieldDef("assignee", source="assigneeId"),
        "experiment_id": FieldDef("experiment_id", source="experimentId"),
        "due_date": FieldDef("due_date", "date", source="dueDate"),
        "created_at": FieldDef("created_at", "date", source="createdAt"),
        "labels": FieldDef("labels", "list"),
        "overdue": FieldDef("overdue", "bool", derive=_overdue),
        "due_today": FieldDef("due_today", "bool", derive=_due_today),
        "due_this_week": FieldDef("due_this_week", "bool", derive=_due_this_week),
    },
    search_fields=("title", "description", "labels"),
    default_sort=SortSpec("due_date", "asc"),
    stats=(
        StatDef("total", lambda records, acc: len(records)),
        StatDef("completed", _equals("status", "completed")),
        StatDef("overdue", _flag("overdue")),
    ),
    histograms=("status", "priority"),
    actions=_TASK_ACTIONS,
)


# ---------------------------------------------------------------------------
# Breeding pairs
# ---------------------------------------------------------------------------

BREEDING_PAIRS = FieldTable(
    kind="breeding",
    id_field="_id",
    fields={
        "_id": FieldDef("_id", "auto"),
        "code": FieldDef("code"),
        "male": FieldDef("male"),
        "female": FieldDef("female"),
        "status": FieldDef("status"),
        "notes": FieldDef("notes"),
        "start_date": FieldDef("start_date", "date", source="startDate"),
        "expected_delivery": FieldDef("expected_delivery", "date", source="expectedDelivery"),
        "offspring_count": FieldDef("offspring_count", "number", source="offspringCount"),
        "upcoming": FieldDef("upcoming", "bool", derive=_upcoming),
    },
    search_fields=("code", "male", "female", "notes"),
    default_sort=SortSpec("start_date", "desc"),
    stats=(
        StatDef("total", lambda records, acc: len(records)),
        StatDef("active", _equals("status", "active")),
        StatDef("upcoming_deliveries", _flag("upcoming")),
        StatDef("offspring_total", lambda records, acc: total(records, lambda r: acc.get(r, "offspring_count"))),
    ),
    histograms=("status",),
    actions={
        "delete": BulkActionDef("delete", "delete", label="Delete selected"),
        "set-active": BulkActionDef("set-active", "set_fields", {"status": "active"}, "Mark active"),
        "set-completed": BulkActionDef("set-completed", "set_fields", {"status": "completed"}, "Mark completed"),
    },
)


ENTITY_TABLES: dict[str, FieldTable] = {
    table.kind: table for table in (ANIMALS, CAGES, TASKS, BREEDING_PAIRS)
}


def get_table(kind: str) -> FieldTable:
    """Look up an entity kind's table. Raises KeyError for unknown kinds."""
    try:
        return ENTITY_TABLES[kind]
    except KeyError:
        raise KeyError(f"Unknown entity kind: {kind}") from None
