"""Campaign lifecycle and scan submission."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from skuaudit.domain.errors import NotFoundError, ValidationError
from skuaudit.domain.model import (
    Campaign,
    CampaignSnapshot,
    CodeTriple,
    ScanEvent,
    ScanStatus,
    canonical_code,
    clean_sku,
    utcnow,
)

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from skuaudit.domain.catalog import Clock, UnitOfWorkFactory
    from skuaudit.domain.ports.persistence import CampaignRepository

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class CampaignRequest:
    name: str | None
    start: datetime | None
    end: datetime | None
    category_target: str | None = None
    type_target: str | None = None
    classification_target: str | None = None
    active: bool = False


@dataclass(slots=True, kw_only=True)
class ScanSubmission:
    campaign_id: UUID | None
    raw_sku: str | None
    branch: str | None = None
    submitter_email: str | None = None
    suggested: CodeTriple = field(default_factory=CodeTriple)


@dataclass(frozen=True, slots=True)
class ScanOutcome:
    event: ScanEvent
    snapshot: CampaignSnapshot | None

    @property
    def status(self) -> ScanStatus:
        return self.event.status


def _optional_code(value: str | None) -> str | None:
    return canonical_code(value) if value else None


def _activate(campaigns: CampaignRepository, campaign: Campaign) -> None:
    campaigns.deactivate_all()
    campaign.active = True


def create_campaign(
    request: CampaignRequest,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> Campaign:
    """Create a campaign and snapshot the whole master catalog for it."""

    if not request.name or request.start is None or request.end is None:
        raise ValidationError("Missing fields: name, start, end")
    if request.start > request.end:
        raise ValidationError("Campaign start must be before its end")

    campaign = Campaign(
        name=request.name,
        start=request.start,
        end=request.end,
        category_target=_optional_code(request.category_target),
        type_target=_optional_code(request.type_target),
        classification_target=_optional_code(request.classification_target),
    )
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        if request.active:
            _activate(repositories.campaigns, campaign)
        repositories.campaigns.add(campaign)
        entries = repositories.master_entries.list_all()
        repositories.snapshots.add_many(
            CampaignSnapshot.of_entry(campaign.id, entry) for entry in entries
        )
        uow.commit()
    log.info(
        "Created campaign %s (%s) with %s snapshot rows",
        campaign.name,
        campaign.id,
        len(entries),
    )
    return campaign


def activate_campaign(
    campaign_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> Campaign:
    """Make ``campaign_id`` the only active campaign."""

    with unit_of_work_factory() as uow:
        campaigns = uow.repositories.campaigns
        campaign = campaigns.get(campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        _activate(campaigns, campaign)
        uow.commit()
    log.info("Activated campaign %s", campaign_id)
    return campaign


def list_campaigns(*, unit_of_work_factory: UnitOfWorkFactory) -> list[Campaign]:
    with unit_of_work_factory() as uow:
        return list(uow.repositories.campaigns.list_all())


def resolve_campaign_id(
    campaign_id: UUID | None,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> UUID:
    """Return ``campaign_id`` or, when not given, the active campaign's id."""

    if campaign_id is not None:
        return campaign_id
    with unit_of_work_factory() as uow:
        active = uow.repositories.campaigns.active()
    if active is None:
        raise ValidationError("campaign_id is required when no campaign is active")
    return active.id


def record_scan(
    submission: ScanSubmission,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock = utcnow,
) -> ScanOutcome:
    """Store one scan, deriving its status and assumed codes from the snapshot.

    Scans of SKUs missing from the snapshot must carry all three suggested
    codes. Suggested codes win over snapshot codes component by component.
    """

    sku = clean_sku(submission.raw_sku)
    if not sku:
        raise ValidationError(f"Invalid SKU: {submission.raw_sku!r}")
    if submission.campaign_id is None:
        raise ValidationError("campaign_id is required")

    given = submission.suggested
    suggested = CodeTriple(
        _optional_code(given.category) or "",
        _optional_code(given.type) or "",
        _optional_code(given.classification) or "",
    )

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        campaign = repositories.campaigns.get(submission.campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign {submission.campaign_id} not found")
        if not campaign.active:
            raise ValidationError(f"Campaign {campaign.id} is not active")

        snapshot = repositories.snapshots.get(campaign.id, sku)
        if snapshot is None:
            if not (suggested.category and suggested.type and suggested.classification):
                raise ValidationError(
                    "Suggested category, type and classification are required "
                    "for SKUs not in the master catalog"
                )
            status = ScanStatus.NOT_IN_MASTER
            baseline = CodeTriple()
        else:
            baseline = snapshot.codes
            status = ScanStatus.OK if campaign.meets_targets(baseline) else ScanStatus.NEEDS_REVIEW

        event = ScanEvent(
            campaign_id=campaign.id,
            sku=sku,
            branch=submission.branch or None,
            submitter_email=submission.submitter_email or None,
            status=status,
            suggested_category_code=suggested.category or None,
            suggested_type_code=suggested.type or None,
            suggested_classification_code=suggested.classification or None,
            assumed_category_code=suggested.category or baseline.category or None,
            assumed_type_code=suggested.type or baseline.type or None,
            assumed_classification_code=suggested.classification
            or baseline.classification
            or None,
            timestamp=clock(),
        )
        repositories.scans.add(event)
        uow.commit()

    log.debug("Recorded %s scan of %s in campaign %s", status, sku, campaign.id)
    return ScanOutcome(event=event, snapshot=snapshot)
