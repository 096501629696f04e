"""Request/response shapes for the collection view endpoints."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator


class FilterRequest(BaseModel):
    """
    Filter criteria by logical field name.

    "__all__", "" and false mean "no filter"; lists mean "any of".
    """

    model_config = {"extra": "forbid"}

    criteria: dict[str, Any] = Field(default_factory=dict)


class SearchRequest(BaseModel):
    model_config = {"extra": "forbid"}

    query: str = Field(default="", max_length=500)


class SortRequest(BaseModel):
    model_config = {"extra": "forbid"}

    key: str = Field(min_length=1)
    direction: Literal["asc", "desc"] = "asc"


class BulkActionRequest(BaseModel):
    """Either a named action from the view's action set, or raw fields to set."""

    model_config = {"extra": "forbid"}

    action: str | None = None
    fields: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> BulkActionRequest:
        if (self.action is None) == (not self.fields):
            raise ValueError("Provide exactly one of 'action' or 'fields'")
        return self


class SelectionResponse(BaseModel):
    selected: list[Any]
    all_selected: bool


class StatsResponse(BaseModel):
    counts: dict[str, int | float]
    groups: dict[str, dict[str, int]]


class ViewResponse(BaseModel):
    """Everything the dashboard needs to draw one collection view."""

    kind: str
    visible: list[dict[str, Any]]
    total: int
    selected: list[Any]
    all_selected: bool
    filters: dict[str, Any]
    search: str
    sort: dict[str, str] | None
    stats: StatsResponse
    error: str | None = None


class JobResultResponse(BaseModel):
    action: str
    target_ids: list[Any]
    succeeded: list[Any]
    failed: dict[str, str]
    error: str | None
    applied: bool
    ok: bool
