"""
Remote collection collaborators.

The view engine depends on one CollectionCollaborator per entity kind:
list_all, create, update, remove, set_field. HttpCollaborator talks to the
REST service; MemoryCollaborator keeps records in-process for tests and
local demos.

Errors are normalized to the taxonomy below so callers never see httpx
exceptions.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Any

import httpx
import pydantic

from backend.models import PAYLOAD_MODELS

logger = logging.getLogger(__name__)

Record = dict[str, Any]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CollaboratorError(Exception):
    """Base class for remote collection failures."""


class TransportError(CollaboratorError):
    """Service unreachable, timed out, or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(CollaboratorError):
    """Target id does not exist server-side."""

    def __init__(self, kind: str, record_id: Any):
        super().__init__(f"{kind} record {record_id!r} not found")
        self.kind = kind
        self.record_id = record_id


class ValidationError(CollaboratorError):
    """Malformed payload. Rejected before dispatch; never retried."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []


def validate_payload(kind: str, payload: dict[str, Any], partial: bool = False) -> Record:
    """
    Validate a create (or partial update) payload against the kind's model.

    Returns the payload as the REST service expects it (camelCase keys,
    JSON-ready values). Kinds without a model pass through unchanged.

    Raises:
        ValidationError: If the payload does not fit the model
    """
    models = PAYLOAD_MODELS.get(kind)
    if models is None:
        return dict(payload)
    model = models[1] if partial else models[0]
    try:
        parsed = model.model_validate(payload)
    except pydantic.ValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        raise ValidationError(f"Invalid {kind} payload: {e.error_count()} error(s)", errors=errors) from e
    if partial:
        return parsed.model_dump(mode="json", by_alias=True, exclude_unset=True)
    return parsed.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Collaborator protocol
# ---------------------------------------------------------------------------


class CollectionCollaborator:
    """
    Abstract CRUD boundary for one entity kind.
    Implement with HTTP for production, or in-memory for tests.
    """

    kind: str = ""

    async def list_all(self) -> list[Record]:
        """Fetch every record. Raises TransportError on failure."""
        raise NotImplementedError

    async def create(self, partial: Record) -> Record:
        """Create a record; returns it with its server-assigned id."""
        raise NotImplementedError

    async def update(self, record_id: Any, partial: Record) -> Record:
        """Apply a partial update; returns the full updated record."""
        raise NotImplementedError

    async def remove(self, record_id: Any) -> None:
        """Delete a record. Raises NotFoundError if it does not exist."""
        raise NotImplementedError

    async def set_field(self, record_id: Any, field_name: str, value: Any) -> Record:
        """One-field update, used for bulk status transitions."""
        return await self.update(record_id, {field_name: value})

    async def aclose(self) -> None:
        return None


class MemoryCollaborator(CollectionCollaborator):
    """In-memory collection for testing and local demos."""

    def __init__(self, kind: str, records: Iterable[Record] = (), id_field: str = "_id"):
        self.kind = kind
        self.id_field = id_field
        self.records: dict[Any, Record] = {}
        self._next_id = 1
        for record in records:
            self.records[record[id_field]] = copy.deepcopy(record)

    async def list_all(self) -> list[Record]:
        return [copy.deepcopy(r) for r in self.records.values()]

    async def create(self, partial: Record) -> Record:
        record = copy.deepcopy(partial)
        if record.get(self.id_field) is None:
            record[self.id_field] = self._new_id()
        self.records[record[self.id_field]] = record
        return copy.deepcopy(record)

    async def update(self, record_id: Any, partial: Record) -> Record:
        if record_id not in self.records:
            raise NotFoundError(self.kind, record_id)
        updated = {**self.records[record_id], **copy.deepcopy(partial)}
        updated[self.id_field] = record_id
        self.records[record_id] = updated
        return copy.deepcopy(updated)

    async def remove(self, record_id: Any) -> None:
        if self.records.pop(record_id, None) is None:
            raise NotFoundError(self.kind, record_id)

    def _new_id(self) -> str:
        while True:
            candidate = f"{self.kind}-{self._next_id:04d}"
            self._next_id += 1
            if candidate not in self.records:
                return candidate


class HttpCollaborator(CollectionCollaborator):
    """
    REST client for one collection.

    Routes: GET / (list), POST / (create), PUT /{id} (update),
    DELETE /{id} (remove), all under `base_url`.
    """

    def __init__(
        self,
        kind: str,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.kind = kind
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        """Build request headers."""
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, path: str, record_id: Any = None, json: Any = None) -> httpx.Response:
        """
        Send one request and normalize failures.

        Raises:
            NotFoundError: 404, or 400 on a request addressed to one record
                (the service rejects malformed ids with 400)
            ValidationError: 400 / 422
            TransportError: Network failure, timeout, or any other non-2xx
        """
        try:
            response = await self.client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            logger.warning("%s %s%s timed out", method, self.base_url, path)
            raise TransportError(f"{self.kind}: {method} {path} timed out") from e
        except httpx.HTTPError as e:
            logger.warning("%s %s%s failed: %s", method, self.base_url, path, e)
            raise TransportError(f"{self.kind}: {method} {path} failed: {e}") from e

        if response.status_code == 404 or (response.status_code == 400 and record_id is not None):
            raise NotFoundError(self.kind, record_id)
        if response.status_code in (400, 422):
            raise ValidationError(_error_message(response, f"{self.kind}: request rejected"))
        if response.is_error:
            message = _error_message(response, f"{self.kind}: server returned {response.status_code}")
            raise TransportError(message, status_code=response.status_code)
        return response

    async def list_all(self) -> list[Record]:
        response = await self._request("GET", "/")
        data = _json(response, self.kind)
        if not isinstance(data, list):
            raise TransportError(f"{self.kind}: expected a list, got {type(data).__name__}")
        return data

    async def create(self, partial: Record) -> Record:
        response = await self._request("POST", "/", json=partial)
        return _json(response, self.kind)

    async def update(self, record_id: Any, partial: Record) -> Record:
        response = await self._request("PUT", f"/{record_id}", record_id=record_id, json=partial)
        return _json(response, self.kind)

    async def remove(self, record_id: Any) -> None:
        await self._request("DELETE", f"/{record_id}", record_id=record_id)

    async def aclose(self) -> None:
        """Close the underlying client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _json(response: httpx.Response, kind: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise TransportError(f"{kind}: response was not JSON") from e


def _error_message(response: httpx.Response, fallback: str) -> str:
    # The REST service answers errors with {"message": "..."}
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback
