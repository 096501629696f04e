"""Cage payload models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

CageType = Literal["standard", "breeding", "quarantine", "isolation", "custom"]
CageStatus = Literal["available", "occupied", "maintenance", "quarantine"]


class CreateCageRequest(BaseModel):
    """What the dashboard sends to create a cage."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    name: str = Field(min_length=1, max_length=200)
    type: CageType = "standard"
    location: str = Field(min_length=1)
    capacity: int = Field(default=1, ge=1)
    current_occupancy: int = Field(default=0, ge=0, alias="currentOccupancy")
    status: CageStatus = "available"
    notes: str | None = None

    @model_validator(mode="after")
    def _occupancy_within_capacity(self) -> CreateCageRequest:
        if self.current_occupancy > self.capacity:
            raise ValueError("currentOccupancy cannot exceed capacity")
        return self


class UpdateCageRequest(BaseModel):
    """Partial update. All fields optional."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    name: str | None = Field(default=None, min_length=1, max_length=200)
    type: CageType | None = None
    location: str | None = Field(default=None, min_length=1)
    capacity: int | None = Field(default=None, ge=1)
    current_occupancy: int | None = Field(default=None, ge=0, alias="currentOccupancy")
    status: CageStatus | None = None
    notes: str | None = None
