"""Collection view routes — filter, search, sort, select, bulk actions, CRUD."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from backend.models.view import (
    BulkActionRequest,
    FilterRequest,
    JobResultResponse,
    SearchRequest,
    SelectionResponse,
    SortRequest,
    StatsResponse,
    ViewResponse,
)
from backend.services.collaborators import NotFoundError, TransportError, ValidationError
from backend.services.dashboard import dashboard
from backend.services.view_controller import ViewController
from engine.kernel.types import BulkAction, SortSpec

router = APIRouter(prefix="/api/views", tags=["views"])


def _controller(kind: str) -> ViewController:
    try:
        return dashboard.get(kind)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown view: {kind}") from None


@contextmanager
def _engine_errors() -> Iterator[None]:
    """Map collaborator errors onto HTTP statuses."""
    try:
        yield
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except TransportError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e


def _record_id(controller: ViewController, raw: str) -> Any:
    """Path ids arrive as strings; match them to the stored id's type."""
    for record in controller.state.base:
        record_id = record.get(controller.table.id_field)
        if str(record_id) == raw:
            return record_id
    return raw


def _view(controller: ViewController) -> ViewResponse:
    stats = controller.get_stats().to_dict()
    sort = controller.state.sort
    return ViewResponse(
        kind=controller.kind,
        visible=controller.get_visible(),
        total=len(controller.state.base),
        selected=controller.state.selection.ids,
        all_selected=controller.is_all_selected(),
        filters={name: _jsonable(c) for name, c in controller.state.filter.active().items()},
        search=controller.state.search.query,
        sort=sort.to_dict() if sort else None,
        stats=StatsResponse(**stats),
        error=controller.error,
    )


def _jsonable(criterion: Any) -> Any:
    if isinstance(criterion, (set, frozenset)):
        return sorted(criterion, key=str)
    return criterion


def _selection(controller: ViewController) -> SelectionResponse:
    return SelectionResponse(selected=controller.state.selection.ids, all_selected=controller.is_all_selected())


@router.post("/{kind}/load", status_code=200)
async def load_view(kind: str) -> ViewResponse:
    """(Re)load the base collection from the remote service."""
    controller = _controller(kind)
    if not await controller.load():
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=controller.error)
    return _view(controller)


@router.get("/{kind}", status_code=200)
async def get_view(kind: str) -> ViewResponse:
    """Current visible collection, selection and stats."""
    return _view(_controller(kind))


@router.put("/{kind}/filter", status_code=200)
async def set_filter(kind: str, req: FilterRequest) -> ViewResponse:
    controller = _controller(kind)
    controller.set_filter(req.criteria)
    return _view(controller)


@router.delete("/{kind}/filter", status_code=200)
async def clear_filters(kind: str) -> ViewResponse:
    """Clear the search text and every filter."""
    controller = _controller(kind)
    controller.clear_filters()
    return _view(controller)


@router.put("/{kind}/search", status_code=200)
async def set_search(kind: str, req: SearchRequest) -> ViewResponse:
    controller = _controller(kind)
    controller.set_search(req.query)
    return _view(controller)


@router.put("/{kind}/sort", status_code=200)
async def set_sort(kind: str, req: SortRequest) -> ViewResponse:
    controller = _controller(kind)
    controller.set_sort(SortSpec(key=req.key, direction=req.direction))
    return _view(controller)


@router.post("/{kind}/select-all", status_code=200)
async def select_all(kind: str) -> SelectionResponse:
    """Select-all checkbox. Clears when everything visible is already selected."""
    controller = _controller(kind)
    controller.select_all_visible()
    return _selection(controller)


@router.post("/{kind}/select/{record_id}", status_code=200)
async def toggle_select(kind: str, record_id: str) -> SelectionResponse:
    controller = _controller(kind)
    controller.toggle_select(_record_id(controller, record_id))
    return _selection(controller)


@router.delete("/{kind}/select", status_code=200)
async def clear_selection(kind: str) -> SelectionResponse:
    controller = _controller(kind)
    controller.clear_selection()
    return _selection(controller)


@router.post("/{kind}/bulk", status_code=200)
async def run_bulk_action(kind: str, req: BulkActionRequest) -> JobResultResponse:
    """
    Apply a bulk action to the current selection.

    Returns 409 when the job failed as a whole; partial results under the
    settle-all policy come back with status 200 and a per-id failure map.
    """
    controller = _controller(kind)
    try:
        action = controller.resolve_action(req.action) if req.action else BulkAction.set_fields(**req.fields)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    with _engine_errors():
        result = await controller.run_bulk_action(action)

    if result.error:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.to_dict())
    return JobResultResponse(**result.to_dict())


@router.post("/{kind}/records", status_code=201)
async def create_record(kind: str, payload: dict[str, Any]) -> dict[str, Any]:
    controller = _controller(kind)
    with _engine_errors():
        return await controller.create_one(payload)


@router.put("/{kind}/records/{record_id}", status_code=200)
async def update_record(kind: str, record_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    controller = _controller(kind)
    with _engine_errors():
        return await controller.update_one(_record_id(controller, record_id), payload)


@router.delete("/{kind}/records/{record_id}", status_code=204)
async def delete_record(kind: str, record_id: str) -> None:
    controller = _controller(kind)
    with _engine_errors():
        await controller.delete_one(_record_id(controller, record_id))


@router.get("/{kind}/export", response_class=PlainTextResponse)
async def export_view(kind: str, format: str = Query(default="csv", pattern="^(csv|json)$")) -> PlainTextResponse:
    """Export the selection, or the visible collection when nothing is selected."""
    controller = _controller(kind)
    media_type = "text/csv" if format == "csv" else "application/json"
    return PlainTextResponse(content=controller.export(format), media_type=media_type)


@router.get("/{kind}/groups/{field_name}", status_code=200)
async def group_view(kind: str, field_name: str) -> dict[str, list[dict[str, Any]]]:
    """Visible records grouped by a field, e.g. task status for the Kanban board."""
    controller = _controller(kind)
    return {str(value): records for value, records in controller.groups(field_name).items()}
