"""
Pytest configuration and fixtures for Vivarium backend tests.
"""

from __future__ import annotations

import os

import httpx
import pytest
import pytest_asyncio

# Set test environment variables before importing config
os.environ.setdefault("VIVARIUM_API_URL", "http://vivarium.test/api")
os.environ.setdefault("ENVIRONMENT", "test")

from backend.main import app  # noqa: E402
from backend.services.dashboard import dashboard  # noqa: E402
from backend.services.view_controller import ViewController  # noqa: E402
from backend.tests.fakes import NOW, FlakyCollaborator, animal_records, task_records  # noqa: E402
from engine.kernel.entities import ANIMALS, TASKS  # noqa: E402


@pytest.fixture
def animal_collaborator():
    return FlakyCollaborator("animals", animal_records())


@pytest.fixture
def task_collaborator():
    return FlakyCollaborator("tasks", task_records(), id_field="id")


@pytest_asyncio.fixture(loop_scope="session")
async def animal_view(animal_collaborator):
    """Loaded animals controller, default (all-or-nothing) settlement."""
    controller = ViewController(ANIMALS, animal_collaborator, clock=lambda: NOW)
    assert await controller.load()
    return controller


@pytest_asyncio.fixture(loop_scope="session")
async def task_view(task_collaborator):
    controller = ViewController(TASKS, task_collaborator, clock=lambda: NOW)
    assert await controller.load()
    return controller


@pytest_asyncio.fixture(loop_scope="session")
async def async_client(animal_collaborator, task_collaborator):
    """Client for the API with memory-backed animal and task views registered."""
    dashboard.register("animals", animal_collaborator, clock=lambda: NOW)
    dashboard.register("tasks", task_collaborator, clock=lambda: NOW)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await dashboard.close()
