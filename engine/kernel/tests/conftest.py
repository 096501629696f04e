"""
Engine kernel test configuration.

Shared record fixtures for the view engine tests. Records are shaped like
the REST service's documents (camelCase keys, ISO date strings) and all
derived fields are evaluated against the fixed NOW below.
"""

from datetime import UTC, datetime

import pytest

from engine.kernel.entities import ANIMALS, BREEDING_PAIRS, CAGES, TASKS
from engine.kernel.fields import FieldAccessor

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def animals():
    return [
        {
            "_id": "a1",
            "name": "Whiskers",
            "species": "rat",
            "strain": "Sprague Dawley",
            "gender": "male",
            "status": "active",
            "healthStatus": "good",
            "location": "Room 101",
            "age": 12,
            "weight": 310.5,
            "dateOfBirth": "2023-06-01T00:00:00Z",
            "nextHealthCheck": "2024-05-01T00:00:00Z",
            "experiments": ["EXP-7", "EXP-9"],
            "notes": "Blue cage, top shelf",
        },
        {
            "_id": "a2",
            "name": "Nibbles",
            "species": "mouse",
            "strain": "C57BL/6",
            "gender": "female",
            "status": "quarantine",
            "healthStatus": "fair",
            "location": "Isolation B",
            "age": 4,
            "weight": 21.0,
            "dateOfBirth": "2024-02-01T00:00:00Z",
            "nextHealthCheck": "2024-07-01T00:00:00Z",
            "experiments": [],
        },
        {
            "_id": "a3",
            "name": "Pip",
            "species": "mouse",
            "strain": "BALB/c",
            "gender": "female",
            "status": "active",
            "healthStatus": "excellent",
            "location": "Room 102",
            "age": 7,
            "weight": 24.3,
            "dateOfBirth": "2023-11-01",
            "experiments": ["EXP-7"],
            "notes": "cage blue tag",
        },
        {
            "_id": "a4",
            "name": "Alby",
            "species": "rat",
            "strain": "Wistar",
            "gender": "male",
            "status": "deceased",
            "location": "Room 101",
            "age": 20,
            "weight": 402.0,
        },
    ]


@pytest.fixture
def cages():
    return [
        {"_id": "c1", "name": "R101-A", "type": "standard", "status": "occupied", "capacity": 4, "currentOccupancy": 4, "location": "Room 101"},
        {"_id": "c2", "name": "R101-B", "type": "standard", "status": "available", "capacity": 4, "currentOccupancy": 1, "location": "Room 101"},
        {"_id": "c3", "name": "ISO-1", "type": "quarantine", "status": "occupied", "capacity": 1, "currentOccupancy": 1, "location": "Isolation B"},
        {"_id": "c4", "name": "BR-1", "type": "breeding", "status": "maintenance", "capacity": 3, "currentOccupancy": 0, "location": "Room 103"},
    ]


@pytest.fixture
def tasks():
    return [
        {"id": 1, "title": "Weigh rats", "status": "pending", "priority": "medium", "assigneeId": "u1", "dueDate": "2024-05-30T09:00:00Z", "labels": ["weekly"]},
        {"id": 2, "title": "Clean ISO-1", "status": "in-progress", "priority": "critical", "assigneeId": "u2", "dueDate": "2024-06-03T09:00:00Z", "labels": []},
        {"id": 3, "title": "Order feed", "status": "completed", "priority": "low", "assigneeId": "u1", "dueDate": "2024-05-01T09:00:00Z", "labels": ["supply"]},
        {"id": 4, "title": "Review protocol", "status": "review", "priority": "high", "dueDate": "2024-06-10T09:00:00Z"},
        {"id": 5, "title": "Health checks", "status": "pending", "priority": "critical", "assigneeId": "u3"},
    ]


@pytest.fixture
def breeding_pairs():
    return [
        {"_id": "b1", "code": "BP-001", "male": "Whiskers", "female": "Daisy", "status": "active", "startDate": "2024-04-01", "expectedDelivery": "2024-06-20", "offspringCount": 0},
        {"_id": "b2", "code": "BP-002", "male": "Alby", "female": "Clover", "status": "completed", "startDate": "2024-01-10", "expectedDelivery": "2024-02-01", "offspringCount": 9},
        {"_id": "b3", "code": "BP-003", "male": "Rex", "female": "Luna", "status": "active", "startDate": "2024-05-15", "offspringCount": 2},
    ]


@pytest.fixture
def animal_accessor():
    return FieldAccessor(ANIMALS, now=NOW)


@pytest.fixture
def cage_accessor():
    return FieldAccessor(CAGES, now=NOW)


@pytest.fixture
def task_accessor():
    return FieldAccessor(TASKS, now=NOW)


@pytest.fixture
def breeding_accessor():
    return FieldAccessor(BREEDING_PAIRS, now=NOW)
