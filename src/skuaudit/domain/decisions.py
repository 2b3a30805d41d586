"""Decision workflow for catalog updates.

State machine of an ``UpdateDecision``::

    (none)  --decide/accept-------------> pending
    (none)  --decide/accept, apply now--> applied   (+ master upsert)
    (none)  --decide/reject-------------> rejected
    pending --apply---------------------> applied   (+ master upsert)
    applied --revert--------------------> new pending row with old/new swapped
    pending/rejected --undo-------------> deleted
    any     --archive(true/false)-------> same status, archived flag toggled

At most one non-archived pending decision exists per ``(campaign, sku)``: any
operation that creates a pending row archives the previous one first. Each
operation runs in a single unit of work and commits once; validation, lookup
and state checks all happen before the first mutation.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from skuaudit.domain.catalog import upsert_master_entry
from skuaudit.domain.errors import InvalidTransitionError, NotFoundError, ValidationError
from skuaudit.domain.model import (
    CodeTriple,
    DecisionStatus,
    UpdateDecision,
    Verdict,
    canonical_code,
    clean_sku,
    utcnow,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from skuaudit.domain.catalog import Clock, UnitOfWorkFactory
    from skuaudit.domain.ports.persistence import DecisionRepository

DEFAULT_ACTOR = "admin"

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class DecisionRequest:
    """Operator input for :func:`decide`."""

    campaign_id: UUID | None
    sku: str | None
    proposal: CodeTriple | None
    verdict: Verdict | str | None
    decided_by: str | None = None
    apply_immediately: bool = False
    notes: str = ""


def parse_verdict(value: Verdict | str | None) -> Verdict:
    if isinstance(value, Verdict):
        return value
    try:
        return Verdict(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Invalid decision: {value!r} (expected accept or reject)") from exc


def _require_ids(decision_ids: Sequence[UUID]) -> list[UUID]:
    unique = list(dict.fromkeys(decision_ids))
    if not unique:
        raise ValidationError("No decision ids given")
    return unique


def _load_all(repository: DecisionRepository, decision_ids: list[UUID]) -> list[UpdateDecision]:
    found = {decision.id: decision for decision in repository.get_many(decision_ids)}
    missing = [str(decision_id) for decision_id in decision_ids if decision_id not in found]
    if missing:
        raise NotFoundError(f"Unknown decision ids: {', '.join(missing)}")
    return [found[decision_id] for decision_id in decision_ids]


def _load_one(repository: DecisionRepository, decision_id: UUID) -> UpdateDecision:
    decision = repository.get(decision_id)
    if decision is None:
        raise NotFoundError(f"Decision {decision_id} not found")
    return decision


def _archive_active_pending(
    repository: DecisionRepository,
    campaign_id: UUID,
    sku: str,
    *,
    by: str,
    at: datetime,
) -> int:
    active = repository.query(
        campaign_id,
        sku=sku,
        status=DecisionStatus.PENDING,
        archived=False,
    )
    for decision in active:
        decision.set_archived(True, by=by, at=at)
    return len(active)


def decide(
    request: DecisionRequest,
    *,
    archived_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock = utcnow,
) -> UpdateDecision:
    """Record an accept/reject decision for a proposal, optionally applying it.

    A pending decision it supersedes is archived by ``request.decided_by``,
    falling back to ``archived_by``. The new row keeps ``decided_by`` as given.
    """

    missing = (
        request.campaign_id is None
        or not request.sku
        or request.proposal is None
        or not request.verdict
    )
    if missing:
        raise ValidationError("campaign_id, sku, proposal and decision are required")
    verdict = parse_verdict(request.verdict)
    sku = clean_sku(request.sku)
    if not sku:
        raise ValidationError(f"Invalid SKU: {request.sku!r}")

    proposal = request.proposal
    new_codes = CodeTriple.canonical(
        proposal.category,
        proposal.type,
        proposal.classification,
    )
    apply_now = verdict is Verdict.ACCEPT and request.apply_immediately
    if verdict is Verdict.REJECT:
        status = DecisionStatus.REJECTED
    else:
        status = DecisionStatus.APPLIED if apply_now else DecisionStatus.PENDING

    now = clock()
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        snapshot = repositories.snapshots.get(request.campaign_id, sku)
        archived = _archive_active_pending(
            repositories.decisions,
            request.campaign_id,
            sku,
            by=request.decided_by or archived_by or DEFAULT_ACTOR,
            at=now,
        )
        decision = UpdateDecision(
            campaign_id=request.campaign_id,
            sku=sku,
            old_category_code=snapshot.category_code if snapshot else None,
            old_type_code=snapshot.type_code if snapshot else None,
            old_classification_code=snapshot.classification_code if snapshot else None,
            new_category_code=new_codes.category,
            new_type_code=new_codes.type,
            new_classification_code=new_codes.classification,
            status=status,
            decided_by=request.decided_by or None,
            decided_at=now,
            applied_at=now if apply_now else None,
            notes=request.notes or "",
            timestamp=now,
        )
        repositories.decisions.add(decision)
        if apply_now:
            upsert_master_entry(repositories.master_entries, sku, new_codes, at=now)
        uow.commit()

    log.info(
        "Decision %s for %s in campaign %s: %s -> %s (archived %s pending)",
        verdict,
        sku,
        request.campaign_id,
        new_codes,
        status,
        archived,
    )
    return decision


def apply_decisions(
    decision_ids: Sequence[UUID],
    *,
    decided_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock = utcnow,
) -> list[UpdateDecision]:
    """Push the new codes of every referenced decision to the master catalog.

    Status is not checked: re-applying an applied decision rewrites the same
    codes and refreshes its timestamps.
    """

    ids = _require_ids(decision_ids)
    now = clock()
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        decisions = _load_all(repositories.decisions, ids)
        for decision in decisions:
            upsert_master_entry(
                repositories.master_entries,
                decision.sku,
                decision.new_codes,
                at=now,
            )
            decision.mark_applied(by=decided_by, at=now)
        uow.commit()
    log.info("Applied %s decisions", len(decisions))
    return decisions


def archive_decisions(
    decision_ids: Sequence[UUID],
    *,
    archived: bool = True,
    archived_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock = utcnow,
) -> int:
    """Set or clear the archived flag. Status is never changed."""

    ids = _require_ids(decision_ids)
    now = clock()
    with unit_of_work_factory() as uow:
        decisions = _load_all(uow.repositories.decisions, ids)
        for decision in decisions:
            decision.set_archived(archived, by=archived_by or DEFAULT_ACTOR, at=now)
        uow.commit()
    log.info("%s %s decisions", "Archived" if archived else "Unarchived", len(decisions))
    return len(decisions)


def undo_decision(
    decision_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> UpdateDecision:
    """Delete a decision that has not been applied. Applied ones must be reverted."""

    with unit_of_work_factory() as uow:
        repository = uow.repositories.decisions
        decision = _load_one(repository, decision_id)
        if decision.status is DecisionStatus.APPLIED:
            raise InvalidTransitionError(
                f"Decision {decision_id} is applied; revert it instead of undoing"
            )
        repository.remove(decision)
        uow.commit()
    log.info("Undid %s decision %s for %s", decision.status, decision_id, decision.sku)
    return decision


def revert_decision(
    decision_id: UUID,
    *,
    decided_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock = utcnow,
) -> UpdateDecision:
    """Propose restoring the codes an applied decision replaced.

    The result is a new pending decision; it still has to be applied. When the
    original had no recorded baseline its own new codes are proposed again.
    """

    now = clock()
    with unit_of_work_factory() as uow:
        repository = uow.repositories.decisions
        original = _load_one(repository, decision_id)
        if original.status is not DecisionStatus.APPLIED:
            raise InvalidTransitionError(
                f"Only applied decisions can be reverted ({decision_id} is {original.status})"
            )
        actor = decided_by or DEFAULT_ACTOR
        _archive_active_pending(
            repository,
            original.campaign_id,
            original.sku,
            by=actor,
            at=now,
        )
        revert = UpdateDecision(
            campaign_id=original.campaign_id,
            sku=original.sku,
            old_category_code=original.new_category_code,
            old_type_code=original.new_type_code,
            old_classification_code=original.new_classification_code,
            new_category_code=canonical_code(
                _first_set(original.old_category_code, original.new_category_code)
            ),
            new_type_code=canonical_code(
                _first_set(original.old_type_code, original.new_type_code)
            ),
            new_classification_code=canonical_code(
                _first_set(original.old_classification_code, original.new_classification_code)
            ),
            status=DecisionStatus.PENDING,
            decided_by=actor,
            decided_at=now,
            notes=f"revert of {original.id}",
            timestamp=now,
        )
        repository.add(revert)
        uow.commit()
    log.info("Reverted decision %s for %s as %s", decision_id, original.sku, revert.id)
    return revert


def _first_set(preferred: str | None, fallback: str) -> str:
    return fallback if preferred is None else preferred


def list_decisions(
    campaign_id: UUID,
    *,
    status: DecisionStatus | None = None,
    archived: bool | None = None,
    unit_of_work_factory: UnitOfWorkFactory,
) -> list[UpdateDecision]:
    """Return a campaign's decisions, newest first."""

    with unit_of_work_factory() as uow:
        return list(
            uow.repositories.decisions.query(campaign_id, status=status, archived=archived)
        )
