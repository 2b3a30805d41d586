"""Application orchestration entry points."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from skuaudit.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from skuaudit.config import get_review_config
from skuaudit.domain import campaigns, catalog, decisions
from skuaudit.domain.review import (
    ConsensusFilter,
    build_discrepancy_items,
    build_review_items,
    detect_branch_conflicts,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping, Sequence
    from uuid import UUID

    from skuaudit.domain.catalog import MasterRow, UnitOfWorkFactory
    from skuaudit.domain.model import (
        Campaign,
        CampaignSnapshot,
        DecisionStatus,
        ScanEvent,
        UpdateDecision,
    )
    from skuaudit.domain.review import BranchConflict, DiscrepancyItem, ReviewItem


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CampaignRecords:
    """Everything the review read models need for one campaign."""

    campaign_id: UUID
    events: tuple[ScanEvent, ...]
    snapshots: tuple[CampaignSnapshot, ...]
    decisions: tuple[UpdateDecision, ...]


def ensure_started() -> None:
    """Start the SQLAlchemy adapter unless a caller already did."""

    if not is_started():
        startup()


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError:
        log.exception("Storage failure while trying to %s", action)
        raise


def _factory(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    ensure_started()
    return SqlAlchemyUnitOfWork


def _actor(name: str | None) -> str:
    return name or get_review_config().default_actor


# Catalog ---------------------------------------------------------------------


def import_master(
    rows: Iterable[MasterRow | Mapping[str, object]],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> int:
    with _storage_errors("import master entries"):
        return catalog.import_master_entries(
            rows,
            unit_of_work_factory=_factory(unit_of_work_factory),
        )


# Campaigns -------------------------------------------------------------------


def create_campaign(
    request: campaigns.CampaignRequest,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Campaign:
    with _storage_errors("create a campaign"):
        return campaigns.create_campaign(
            request,
            unit_of_work_factory=_factory(unit_of_work_factory),
        )


def activate_campaign(
    campaign_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Campaign:
    with _storage_errors("activate a campaign"):
        return campaigns.activate_campaign(
            campaign_id,
            unit_of_work_factory=_factory(unit_of_work_factory),
        )


def list_campaigns(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> list[Campaign]:
    with _storage_errors("list campaigns"):
        return campaigns.list_campaigns(unit_of_work_factory=_factory(unit_of_work_factory))


def submit_scan(
    submission: campaigns.ScanSubmission,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> campaigns.ScanOutcome:
    with _storage_errors("record a scan"):
        return campaigns.record_scan(
            submission,
            unit_of_work_factory=_factory(unit_of_work_factory),
        )


# Review ----------------------------------------------------------------------


def load_campaign_records(
    campaign_id: UUID | None,
    *,
    sku_filter: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> CampaignRecords:
    """Fetch scans, snapshots and decisions for a campaign (default: the active one)."""

    factory = _factory(unit_of_work_factory)
    with _storage_errors("load campaign records"):
        resolved = campaigns.resolve_campaign_id(campaign_id, unit_of_work_factory=factory)
        with factory() as uow:
            repositories = uow.repositories
            return CampaignRecords(
                campaign_id=resolved,
                events=tuple(repositories.scans.for_campaign(resolved, sku_contains=sku_filter)),
                snapshots=tuple(repositories.snapshots.for_campaign(resolved)),
                decisions=tuple(repositories.decisions.query(resolved)),
            )


def review_campaign(
    campaign_id: UUID | None = None,
    *,
    sku_filter: str | None = None,
    consensus_filter: ConsensusFilter = ConsensusFilter.ANY,
    only_differences: bool = True,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[ReviewItem]:
    records = load_campaign_records(
        campaign_id,
        sku_filter=sku_filter,
        unit_of_work_factory=unit_of_work_factory,
    )
    return build_review_items(
        records.events,
        records.snapshots,
        records.decisions,
        sku_filter=sku_filter,
        consensus_filter=consensus_filter,
        only_differences=only_differences,
        vote_floor=get_review_config().vote_floor,
    )


def discrepancies(
    campaign_id: UUID | None = None,
    *,
    sku_filter: str | None = None,
    min_votes: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[DiscrepancyItem]:
    records = load_campaign_records(
        campaign_id,
        sku_filter=sku_filter,
        unit_of_work_factory=unit_of_work_factory,
    )
    return build_discrepancy_items(
        records.events,
        records.snapshots,
        sku_filter=sku_filter,
        min_votes=min_votes if min_votes is not None else get_review_config().min_votes,
    )


def branch_conflicts(
    campaign_id: UUID | None = None,
    *,
    sku_filter: str | None = None,
    min_branches: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[BranchConflict]:
    records = load_campaign_records(
        campaign_id,
        sku_filter=sku_filter,
        unit_of_work_factory=unit_of_work_factory,
    )
    threshold = min_branches if min_branches is not None else get_review_config().min_branches
    return detect_branch_conflicts(
        records.events,
        sku_filter=sku_filter,
        min_branches=threshold,
    )


# Decisions -------------------------------------------------------------------


def decide(
    request: decisions.DecisionRequest,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> UpdateDecision:
    with _storage_errors("record a decision"):
        return decisions.decide(
            request,
            archived_by=_actor(request.decided_by),
            unit_of_work_factory=_factory(unit_of_work_factory),
        )


def apply_decisions(
    decision_ids: Sequence[UUID],
    *,
    decided_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[UpdateDecision]:
    with _storage_errors("apply decisions"):
        return decisions.apply_decisions(
            decision_ids,
            decided_by=_actor(decided_by),
            unit_of_work_factory=_factory(unit_of_work_factory),
        )


def archive_decisions(
    decision_ids: Sequence[UUID],
    *,
    archived: bool = True,
    archived_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> int:
    with _storage_errors("archive decisions"):
        return decisions.archive_decisions(
            decision_ids,
            archived=archived,
            archived_by=_actor(archived_by),
            unit_of_work_factory=_factory(unit_of_work_factory),
        )


def undo_decision(
    decision_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> UpdateDecision:
    with _storage_errors("undo a decision"):
        return decisions.undo_decision(
            decision_id,
            unit_of_work_factory=_factory(unit_of_work_factory),
        )


def revert_decision(
    decision_id: UUID,
    *,
    decided_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> UpdateDecision:
    with _storage_errors("revert a decision"):
        return decisions.revert_decision(
            decision_id,
            decided_by=_actor(decided_by),
            unit_of_work_factory=_factory(unit_of_work_factory),
        )


def list_decisions(
    campaign_id: UUID | None = None,
    *,
    status: DecisionStatus | None = None,
    archived: bool | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[UpdateDecision]:
    factory = _factory(unit_of_work_factory)
    with _storage_errors("list decisions"):
        resolved = campaigns.resolve_campaign_id(campaign_id, unit_of_work_factory=factory)
        return decisions.list_decisions(
            resolved,
            status=status,
            archived=archived,
            unit_of_work_factory=factory,
        )
