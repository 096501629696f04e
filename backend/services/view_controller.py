"""
ViewController — one dashboard collection view.

Owns a ViewState (base collection, filter/search/sort specs, visible
collection, selection) and is the only thing that mutates it. Every spec
change recomputes the visible collection synchronously; CRUD and bulk
operations go through the remote collaborator first and touch local state
only after the server confirms.

Usage:
    controller = ViewController(ANIMALS, HttpCollaborator("animals", url))
    await controller.load()
    controller.set_filter({"status": "active"})
    controller.set_search("rat")
    controller.select_all_visible()
    result = await controller.run_bulk_action("set-quarantine")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from backend.config import settings
from backend.services.bulk import BulkMutationOrchestrator
from backend.services.collaborators import CollaboratorError, CollectionCollaborator, validate_payload
from engine.kernel.export import export_records
from engine.kernel.fields import FieldAccessor
from engine.kernel.stats import compute_stats, group_by
from engine.kernel.types import (
    BulkAction,
    FieldTable,
    FilterSpec,
    JobResult,
    MutationJob,
    Record,
    SearchSpec,
    SortSpec,
    StatsSnapshot,
    now_utc,
)
from engine.kernel.view import ViewState, append_record, find_record, refresh, remove_records, replace_records

logger = logging.getLogger(__name__)


class ViewController:
    """Mutable wrapper around one ViewState and its collaborator."""

    def __init__(
        self,
        table: FieldTable,
        collaborator: CollectionCollaborator,
        orchestrator: BulkMutationOrchestrator | None = None,
        case_insensitive: bool | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.table = table
        self.collaborator = collaborator
        self.orchestrator = orchestrator or BulkMutationOrchestrator(settings.BULK_SETTLEMENT)
        self.clock = clock or now_utc
        if case_insensitive is None:
            case_insensitive = settings.CASE_INSENSITIVE_MATCHING
        self.state = ViewState(table=table, case_insensitive=case_insensitive)
        self.error: str | None = None
        self.loaded = False

    @property
    def kind(self) -> str:
        return self.table.kind

    # -- Loading -------------------------------------------------------------

    async def load(self) -> bool:
        """
        Replace the base collection with the collaborator's records.

        On failure the base collection is emptied and `error` is set; call
        again to retry. Returns True on success.
        """
        self.error = None
        try:
            records = await self.collaborator.list_all()
        except CollaboratorError as e:
            logger.error("Failed to load %s: %s", self.kind, e)
            self.state.base = []
            self.loaded = False
            self.error = f"Failed to load {self.kind}. Please try again later."
            self._recompute()
            return False

        self.state.base = list(records)
        self.loaded = True
        self._recompute()
        logger.info("Loaded %d %s", len(self.state.base), self.kind)
        return True

    # -- View specs ----------------------------------------------------------

    def set_filter(self, spec: FilterSpec | Mapping[str, Any]) -> list[Record]:
        if not isinstance(spec, FilterSpec):
            spec = FilterSpec.from_params(spec)
        ignored = [name for name in spec.active() if not self.table.knows(name)]
        if ignored:
            logger.debug("Ignoring filters on unknown %s fields: %s", self.kind, ignored)
        self.state.filter = spec
        return self._recompute()

    def set_filter_value(self, name: str, criterion: Any) -> list[Record]:
        """Change one criterion, keeping the others."""
        normalized = FilterSpec.from_params({name: criterion}).criteria[name]
        return self.set_filter(self.state.filter.with_criterion(name, normalized))

    def set_search(self, text: str) -> list[Record]:
        self.state.search = SearchSpec(query=text or "", fields=self.state.search.fields)
        return self._recompute()

    def set_sort(self, spec: SortSpec | str, direction: str = "asc") -> list[Record]:
        if isinstance(spec, str):
            spec = SortSpec(key=spec, direction=direction)
        self.state.sort = spec
        return self._recompute()

    def toggle_sort(self, key: str) -> list[Record]:
        """Column-header click: same key flips direction, a new key sorts ascending."""
        current = self.state.sort
        if current is not None and current.key == key:
            return self.set_sort(current.reversed())
        return self.set_sort(SortSpec(key=key))

    def clear_filters(self) -> list[Record]:
        """Drop the search text and every filter criterion."""
        self.state.filter = FilterSpec()
        self.state.search = SearchSpec(query="", fields=self.state.search.fields)
        return self._recompute()

    # -- Reads ---------------------------------------------------------------

    def get_visible(self) -> list[Record]:
        return list(self.state.visible)

    def get_stats(self) -> StatsSnapshot:
        """Stats over the whole base collection, ignoring filters."""
        return compute_stats(self.state.base, self.table, now=self.clock())

    def groups(self, field_name: str) -> dict[Any, list[Record]]:
        """Visible records grouped by a field (Kanban columns)."""
        return group_by(self.state.visible, field_name, FieldAccessor(self.table, now=self.clock()))

    def export(self, fmt: str = "csv") -> str:
        """Export the selected records, or the whole visible collection when nothing is selected."""
        records = self.state.visible
        if len(self.state.selection):
            selected = self.state.selection.as_set()
            records = [r for r in records if r.get(self.table.id_field) in selected]
        return export_records(records, fmt)

    # -- Selection -----------------------------------------------------------

    def toggle_select(self, record_id: Any) -> bool:
        return self.state.selection.toggle(record_id, self.state.visible_ids())

    def select_all_visible(self) -> set[Any]:
        self.state.selection.select_all(self.state.visible_ids())
        return self.get_selected()

    def clear_selection(self) -> None:
        self.state.selection.clear()

    def get_selected(self) -> set[Any]:
        return self.state.selection.as_set()

    def is_all_selected(self) -> bool:
        return self.state.selection.is_all_selected(self.state.visible_ids())

    # -- Mutations -----------------------------------------------------------

    def resolve_action(self, action: BulkAction | str) -> BulkAction:
        if isinstance(action, BulkAction):
            return action
        action_def = self.table.actions.get(action)
        if action_def is None:
            raise ValueError(f"Unknown bulk action for {self.kind}: {action}")
        return action_def.to_action()

    async def run_bulk_action(self, action: BulkAction | str) -> JobResult:
        """
        Apply `action` to the current selection.

        Raises:
            ValueError: If a named action is not in the view's action set
            ValidationError: If the action's fields are malformed
        """
        job = MutationJob.for_selection(self.resolve_action(action), self.state.selection.ids)
        self.error = None
        result = await self.orchestrator.run(job, self.collaborator, self.state)
        if result.error:
            self.error = result.error
        self._recompute()
        return result

    async def create_one(self, payload: Mapping[str, Any]) -> Record:
        data = validate_payload(self.kind, dict(payload))
        record = await self._guard("create", self.collaborator.create(data))
        self.state.base = append_record(self.state.base, record)
        self._recompute()
        return record

    async def update_one(self, record_id: Any, payload: Mapping[str, Any]) -> Record:
        data = validate_payload(self.kind, dict(payload), partial=True)
        record = await self._guard("update", self.collaborator.update(record_id, data))
        if find_record(self.state.base, self.table.id_field, record_id) is not None:
            self.state.base = replace_records(self.state.base, self.table.id_field, {record_id: record})
            self._recompute()
        return record

    async def delete_one(self, record_id: Any) -> None:
        await self._guard("delete", self.collaborator.remove(record_id))
        self.state.base = remove_records(self.state.base, self.table.id_field, [record_id])
        self.state.selection.discard(record_id)
        self._recompute()

    async def _guard(self, verb: str, call):
        # Single-record calls leave local state alone on failure
        self.error = None
        try:
            return await call
        except CollaboratorError as e:
            logger.warning("Failed to %s %s record: %s", verb, self.kind, e)
            self.error = f"Failed to {verb} record. Please try again."
            raise

    def _recompute(self) -> list[Record]:
        dropped = refresh(self.state, now=self.clock())
        if dropped:
            logger.debug("Deselected %d %s no longer visible", len(dropped), self.kind)
        return self.get_visible()
