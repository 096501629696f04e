"""Registry of view controllers, one per entity kind."""

from __future__ import annotations

import logging
from typing import Any

from backend.config import settings
from backend.services.collaborators import CollectionCollaborator, HttpCollaborator
from backend.services.view_controller import ViewController
from engine.kernel.entities import ENTITY_TABLES, get_table

logger = logging.getLogger(__name__)


class Dashboard:
    """Holds the ViewController for each dashboard page."""

    def __init__(self) -> None:
        self.controllers: dict[str, ViewController] = {}

    def register(self, kind: str, collaborator: CollectionCollaborator, **kwargs: Any) -> ViewController:
        """Create (or replace) the controller for `kind`."""
        controller = ViewController(get_table(kind), collaborator, **kwargs)
        self.controllers[kind] = controller
        return controller

    def get(self, kind: str) -> ViewController:
        """Raises KeyError for kinds that have no controller."""
        try:
            return self.controllers[kind]
        except KeyError:
            raise KeyError(f"No view registered for {kind!r}") from None

    def configure_from_settings(self) -> None:
        """Register an HTTP-backed controller for every known kind."""
        for kind in ENTITY_TABLES:
            collaborator = HttpCollaborator(
                kind,
                settings.collection_url(kind),
                token=settings.VIVARIUM_API_TOKEN or None,
                timeout=settings.HTTP_TIMEOUT_SECONDS,
            )
            self.register(kind, collaborator)
        logger.info("Dashboard configured for %s", ", ".join(self.controllers))

    async def close(self) -> None:
        for controller in self.controllers.values():
            await controller.collaborator.aclose()
        self.controllers.clear()


dashboard = Dashboard()
