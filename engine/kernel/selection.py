"""
Vivarium Kernel — Selection

Which record identifiers are selected. The set never holds an id that is
not visible: `retain` runs after every recompute and drops the rest.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class SelectionSet:
    """Selected ids, kept in the order they were selected."""

    def __init__(self, ids: Iterable[Any] = ()):
        self._ids: dict[Any, None] = dict.fromkeys(ids)

    def __contains__(self, record_id: Any) -> bool:
        return record_id in self._ids

    def __iter__(self):
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"SelectionSet({list(self._ids)!r})"

    @property
    def ids(self) -> list[Any]:
        return list(self._ids)

    def as_set(self) -> set[Any]:
        return set(self._ids)

    def toggle(self, record_id: Any, visible_ids: Iterable[Any] | None = None) -> bool:
        """
        Flip one id. Returns True when the id ends up selected.
        With `visible_ids`, an id that is not visible is left unselected.
        """
        if record_id in self._ids:
            del self._ids[record_id]
            return False
        if visible_ids is not None and record_id not in set(visible_ids):
            return False
        self._ids[record_id] = None
        return True

    def select_all(self, visible_ids: Iterable[Any]) -> None:
        """Select-all checkbox: clears when everything visible is selected."""
        visible = list(visible_ids)
        if self.is_all_selected(visible):
            self.clear()
        else:
            self._ids = dict.fromkeys(visible)

    def is_all_selected(self, visible_ids: Iterable[Any]) -> bool:
        visible = set(visible_ids)
        return bool(visible) and visible == set(self._ids)

    def clear(self) -> None:
        self._ids = {}

    def discard(self, record_id: Any) -> None:
        self._ids.pop(record_id, None)

    def retain(self, visible_ids: Iterable[Any]) -> list[Any]:
        """Drop ids that are no longer visible. Returns the dropped ids."""
        visible = set(visible_ids)
        dropped = [i for i in self._ids if i not in visible]
        for record_id in dropped:
            del self._ids[record_id]
        return dropped

    def keep_only(self, ids: Iterable[Any]) -> None:
        keep = set(ids)
        self._ids = {i: None for i in self._ids if i in keep}
