"""
Pydantic models for Vivarium.

All data shapes defined here. No imports from services or routes.
"""

from backend.models.animal import CreateAnimalRequest, UpdateAnimalRequest
from backend.models.breeding import CreateBreedingPairRequest, UpdateBreedingPairRequest
from backend.models.cage import CreateCageRequest, UpdateCageRequest
from backend.models.task import CreateTaskRequest, UpdateTaskRequest
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

# Entity kind → (create model, partial update model)
PAYLOAD_MODELS = {
    "animals": (CreateAnimalRequest, UpdateAnimalRequest),
    "cages": (CreateCageRequest, UpdateCageRequest),
    "tasks": (CreateTaskRequest, UpdateTaskRequest),
    "breeding": (CreateBreedingPairRequest, UpdateBreedingPairRequest),
}

__all__ = [
    # Entity payloads
    "CreateAnimalRequest",
    "UpdateAnimalRequest",
    "CreateCageRequest",
    "UpdateCageRequest",
    "CreateTaskRequest",
    "UpdateTaskRequest",
    "CreateBreedingPairRequest",
    "UpdateBreedingPairRequest",
    "PAYLOAD_MODELS",
    # View models
    "FilterRequest",
    "SearchRequest",
    "SortRequest",
    "BulkActionRequest",
    "SelectionResponse",
    "StatsResponse",
    "ViewResponse",
    "JobResultResponse",
]
