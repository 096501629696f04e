"""Breeding pair payload models."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

BreedingStatus = Literal["active", "completed", "failed"]


class CreateBreedingPairRequest(BaseModel):
    """What the dashboard sends to register a breeding pair."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    code: str = Field(min_length=1, max_length=50)
    male: str = Field(min_length=1)
    female: str = Field(min_length=1)
    start_date: date | datetime = Field(alias="startDate")
    expected_delivery: date | datetime | None = Field(default=None, alias="expectedDelivery")
    status: BreedingStatus = "active"
    offspring_count: int = Field(default=0, ge=0, alias="offspringCount")
    notes: str | None = None


class UpdateBreedingPairRequest(BaseModel):
    """Partial update. All fields optional."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    code: str | None = Field(default=None, min_length=1, max_length=50)
    male: str | None = Field(default=None, min_length=1)
    female: str | None = Field(default=None, min_length=1)
    start_date: date | datetime | None = Field(default=None, alias="startDate")
    expected_delivery: date | datetime | None = Field(default=None, alias="expectedDelivery")
    status: BreedingStatus | None = None
    offspring_count: int | None = Field(default=None, ge=0, alias="offspringCount")
    notes: str | None = None
