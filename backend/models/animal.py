"""Animal payload models, shaped like the REST service's documents."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

AnimalStatus = Literal["active", "inactive", "quarantine", "deceased"]
HealthStatus = Literal["excellent", "good", "fair", "poor"]
Gender = Literal["male", "female"]


class CreateAnimalRequest(BaseModel):
    """What the dashboard sends to create an animal."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    name: str = Field(min_length=1, max_length=200)
    species: str = Field(min_length=1)
    custom_species: str | None = Field(default=None, alias="customSpecies")
    strain: str = Field(min_length=1)
    age: float = Field(ge=0)
    weight: float = Field(ge=0)
    gender: Gender
    status: AnimalStatus
    health_status: HealthStatus | None = Field(default=None, alias="healthStatus")
    location: str = Field(min_length=1)
    date_of_birth: date | datetime = Field(alias="dateOfBirth")
    next_health_check: date | datetime | None = Field(default=None, alias="nextHealthCheck")
    experiments: list[str] = Field(default_factory=list)
    breeding_pair: str | None = Field(default=None, alias="breedingPair")
    notes: str | None = None


class UpdateAnimalRequest(BaseModel):
    """Partial update. All fields optional."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    name: str | None = Field(default=None, min_length=1, max_length=200)
    species: str | None = Field(default=None, min_length=1)
    custom_species: str | None = Field(default=None, alias="customSpecies")
    strain: str | None = Field(default=None, min_length=1)
    age: float | None = Field(default=None, ge=0)
    weight: float | None = Field(default=None, ge=0)
    gender: Gender | None = None
    status: AnimalStatus | None = None
    health_status: HealthStatus | None = Field(default=None, alias="healthStatus")
    location: str | None = Field(default=None, min_length=1)
    date_of_birth: date | datetime | None = Field(default=None, alias="dateOfBirth")
    next_health_check: date | datetime | None = Field(default=None, alias="nextHealthCheck")
    experiments: list[str] | None = None
    breeding_pair: str | None = Field(default=None, alias="breedingPair")
    notes: str | None = None
