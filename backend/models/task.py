"""Task payload models."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

TaskStatus = Literal["pending", "in-progress", "review", "completed"]
TaskPriority = Literal["critical", "high", "medium", "low"]


class CreateTaskRequest(BaseModel):
    """What the dashboard sends to create a task."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    title: str = Field(min_length=1, max_length=300)
    description: str = ""
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    assignee_id: str | None = Field(default=None, alias="assigneeId")
    experiment_id: str | None = Field(default=None, alias="experimentId")
    due_date: date | datetime | None = Field(default=None, alias="dueDate")
    labels: list[str] = Field(default_factory=list)


class UpdateTaskRequest(BaseModel):
    """Partial update. All fields optional."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assignee_id: str | None = Field(default=None, alias="assigneeId")
    experiment_id: str | None = Field(default=None, alias="experimentId")
    due_date: date | datetime | None = Field(default=None, alias="dueDate")
    labels: list[str] | None = None
