"""
Bulk mutation orchestrator.

Applies one action (delete / set fields) to every target id of a
MutationJob. One remote call per id, all dispatched at once with no cap;
the job completes when every call has settled. There is no cancellation.

Settlement policies:
  all_or_nothing  any failure skips reconciliation entirely and reports a
                  single job-level error, even though some remote calls
                  may already have succeeded
  settle_all      every success is reconciled regardless of its siblings;
                  failures come back per id and stay selected
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from backend.services.collaborators import CollaboratorError, CollectionCollaborator, validate_payload
from engine.kernel.types import SETTLEMENT_POLICIES, BulkAction, JobResult, MutationJob, Outcome
from engine.kernel.view import ViewState, find_record, remove_records, replace_records

logger = logging.getLogger(__name__)

JOB_FAILED_MESSAGE = "Failed to perform bulk action. Please try again."


class BulkMutationOrchestrator:
    """Runs MutationJobs against a collaborator and reconciles local state."""

    def __init__(self, policy: str = "all_or_nothing") -> None:
        if policy not in SETTLEMENT_POLICIES:
            raise ValueError(f"Unknown settlement policy: {policy}")
        self.policy = policy

    async def run(
        self,
        job: MutationJob,
        collaborator: CollectionCollaborator,
        state: ViewState | None = None,
    ) -> JobResult:
        """
        Dispatch the job and, when `state` is given, reconcile the outcome
        into its base collection and selection.

        Raises:
            ValidationError: If a set_fields payload is malformed (nothing dispatched)
        """
        action = job.action
        if action.type == "set_fields":
            # Validate once, before anything goes out
            action = BulkAction(
                type="set_fields",
                fields=validate_payload(collaborator.kind, dict(action.fields or {}), partial=True),
            )

        result = JobResult(action=action.describe(), target_ids=list(job.target_ids))
        if not job.target_ids:
            return result

        outcomes = await self.dispatch(action, job.target_ids, collaborator)
        result.succeeded = [o.target_id for o in outcomes if o.ok]
        result.failed = {o.target_id: o.error or "unknown error" for o in outcomes if not o.ok}

        logger.info(
            "bulk %s on %d %s: %d succeeded, %d failed (policy=%s)",
            result.action,
            len(job.target_ids),
            collaborator.kind,
            len(result.succeeded),
            len(result.failed),
            self.policy,
        )

        if result.failed and self.policy == "all_or_nothing":
            result.error = JOB_FAILED_MESSAGE
            return result

        if state is not None:
            reconcile(state, action, outcomes)
            result.applied = True
        return result

    async def dispatch(
        self,
        action: BulkAction,
        target_ids: list[Any],
        collaborator: CollectionCollaborator,
    ) -> list[Outcome]:
        """Issue every call concurrently and wait for all of them to settle."""
        calls = [self._call_one(action, target_id, collaborator) for target_id in target_ids]
        settled = await asyncio.gather(*calls, return_exceptions=True)

        outcomes: list[Outcome] = []
        for target_id, item in zip(target_ids, settled, strict=True):
            if isinstance(item, Outcome):
                outcomes.append(item)
            elif isinstance(item, CollaboratorError):
                logger.warning("bulk call for %s %r failed: %s", collaborator.kind, target_id, item)
                outcomes.append(Outcome(target_id=target_id, ok=False, error=str(item)))
            elif isinstance(item, Exception):
                logger.error("bulk call for %s %r raised", collaborator.kind, target_id, exc_info=item)
                outcomes.append(Outcome(target_id=target_id, ok=False, error=f"{type(item).__name__}: {item}"))
            else:
                raise item
        return outcomes

    async def _call_one(self, action: BulkAction, target_id: Any, collaborator: CollectionCollaborator) -> Outcome:
        if action.type == "delete":
            await collaborator.remove(target_id)
            return Outcome(target_id=target_id, ok=True)

        fields = dict(action.fields or {})
        if len(fields) == 1:
            [(name, value)] = fields.items()
            record = await collaborator.set_field(target_id, name, value)
        else:
            record = await collaborator.update(target_id, fields)
        return Outcome(target_id=target_id, ok=True, record=record or None)


def reconcile(state: ViewState, action: BulkAction, outcomes: list[Outcome]) -> None:
    """
    Apply successful outcomes to `state.base` and trim the selection.

    Ids that left the base collection while the job was in flight are
    skipped. The selection is cleared on full success, otherwise it keeps
    only the failed ids.
    """
    id_field = state.id_field
    present = set(state.base_ids())
    done = [o for o in outcomes if o.ok and o.target_id in present]

    if action.type == "delete":
        state.base = remove_records(state.base, id_field, [o.target_id for o in done])
    else:
        replacements = {}
        for outcome in done:
            local = find_record(state.base, id_field, outcome.target_id) or {}
            updated = dict(outcome.record) if outcome.record else {**local, **dict(action.fields or {})}
            updated[id_field] = outcome.target_id
            replacements[outcome.target_id] = updated
        state.base = replace_records(state.base, id_field, replacements)

    failed = [o.target_id for o in outcomes if not o.ok]
    if failed:
        state.selection.keep_only(failed)
    else:
        state.selection.clear()
