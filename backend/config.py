"""
Vivarium configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os

from engine.kernel.types import SETTLEMENT_POLICIES


def _flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings from environment variables."""

    # Remote collection service
    VIVARIUM_API_URL: str = os.environ.get("VIVARIUM_API_URL", "http://localhost:5000/api")
    VIVARIUM_API_TOKEN: str = os.environ.get("VIVARIUM_API_TOKEN", "")
    HTTP_TIMEOUT_SECONDS: float = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "10.0"))

    # Per-kind collection paths under VIVARIUM_API_URL
    ANIMALS_PATH: str = os.environ.get("ANIMALS_PATH", "/animals")
    CAGES_PATH: str = os.environ.get("CAGES_PATH", "/cages")
    TASKS_PATH: str = os.environ.get("TASKS_PATH", "/tasks")
    BREEDING_PATH: str = os.environ.get("BREEDING_PATH", "/breeding")

    # Engine behaviour
    BULK_SETTLEMENT: str = os.environ.get("BULK_SETTLEMENT", "all_or_nothing")
    CASE_INSENSITIVE_MATCHING: bool = _flag("CASE_INSENSITIVE_MATCHING")

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()

    @property
    def collection_paths(self) -> dict[str, str]:
        """Entity kind → path under VIVARIUM_API_URL."""
        return {
            "animals": self.ANIMALS_PATH,
            "cages": self.CAGES_PATH,
            "tasks": self.TASKS_PATH,
            "breeding": self.BREEDING_PATH,
        }

    def collection_url(self, kind: str) -> str:
        return f"{self.VIVARIUM_API_URL.rstrip('/')}{self.collection_paths[kind]}"


# Singleton instance
settings = Settings()

if settings.BULK_SETTLEMENT not in SETTLEMENT_POLICIES:
    raise RuntimeError(
        f"BULK_SETTLEMENT must be one of {sorted(SETTLEMENT_POLICIES)}, got {settings.BULK_SETTLEMENT!r}"
    )
