"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select, update

from skuaudit.adapters.sqlalchemy.mappings import (
    campaign_snapshot_table,
    campaign_table,
    master_entry_table,
    scan_event_table,
    update_decision_table,
)
from skuaudit.domain.model import (
    Campaign,
    CampaignSnapshot,
    DecisionStatus,
    MasterEntry,
    ScanEvent,
    UpdateDecision,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from sqlalchemy.orm import Session


class SqlAlchemyMasterEntryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: MasterEntry) -> None:
        self.session.add(entity)

    def get(self, sku: str) -> MasterEntry | None:
        return self.session.get(MasterEntry, sku)

    def list_all(self) -> Sequence[MasterEntry]:
        stmt = select(MasterEntry).order_by(master_entry_table.c.sku)
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyCampaignRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Campaign) -> None:
        self.session.add(entity)

    def get(self, campaign_id: UUID) -> Campaign | None:
        return self.session.get(Campaign, campaign_id)

    def list_all(self) -> Sequence[Campaign]:
        stmt = select(Campaign).order_by(campaign_table.c.start)
        return self.session.execute(stmt).scalars().all()

    def active(self) -> Campaign | None:
        stmt = (
            select(Campaign)
            .where(campaign_table.c.active == True)  # noqa: E712
            .order_by(campaign_table.c.start.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def deactivate_all(self) -> None:
        stmt = (
            update(Campaign)
            .where(campaign_table.c.active == True)  # noqa: E712
            .values(active=False)
        )
        self.session.execute(stmt)


class SqlAlchemySnapshotRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CampaignSnapshot) -> None:
        self.session.add(entity)

    def add_many(self, snapshots: Iterable[CampaignSnapshot]) -> None:
        self.session.add_all(list(snapshots))

    def get(self, campaign_id: UUID, sku: str) -> CampaignSnapshot | None:
        return self.session.get(CampaignSnapshot, (campaign_id, sku))

    def for_campaign(self, campaign_id: UUID) -> Sequence[CampaignSnapshot]:
        stmt = (
            select(CampaignSnapshot)
            .where(campaign_snapshot_table.c.campaign_id == campaign_id)
            .order_by(campaign_snapshot_table.c.sku)
        )
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyScanEventRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ScanEvent) -> None:
        self.session.add(entity)

    def for_campaign(
        self,
        campaign_id: UUID,
        *,
        sku_contains: str | None = None,
    ) -> Sequence[ScanEvent]:
        stmt = select(ScanEvent).where(scan_event_table.c.campaign_id == campaign_id)
        needle = (sku_contains or "").strip().upper()
        if needle:
            stmt = stmt.where(scan_event_table.c.sku.contains(needle, autoescape=True))
        stmt = stmt.order_by(scan_event_table.c.timestamp)
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyDecisionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: UpdateDecision) -> None:
        self.session.add(entity)

    def get(self, decision_id: UUID) -> UpdateDecision | None:
        return self.session.get(UpdateDecision, decision_id)

    def get_many(self, decision_ids: Sequence[UUID]) -> Sequence[UpdateDecision]:
        if not decision_ids:
            return []
        stmt = select(UpdateDecision).where(update_decision_table.c.id.in_(list(decision_ids)))
        return self.session.execute(stmt).scalars().all()

    def query(
        self,
        campaign_id: UUID,
        *,
        sku: str | None = None,
        status: DecisionStatus | None = None,
        archived: bool | None = None,
    ) -> Sequence[UpdateDecision]:
        columns = update_decision_table.c
        stmt = select(UpdateDecision).where(columns.campaign_id == campaign_id)
        if sku is not None:
            stmt = stmt.where(columns.sku == sku)
        if status is not None:
            stmt = stmt.where(columns.status == status)
        if archived is not None:
            stmt = stmt.where(columns.archived == archived)
        stmt = stmt.order_by(columns.timestamp.desc())
        return self.session.execute(stmt).scalars().all()

    def remove(self, entity: UpdateDecision) -> None:
        self.session.delete(entity)


if TYPE_CHECKING:
    from skuaudit.domain.ports.persistence import (
        CampaignRepository,
        DecisionRepository,
        MasterEntryRepository,
        ScanEventRepository,
        SnapshotRepository,
    )

    _session_stub = cast("Session", object())
    _master_repo: MasterEntryRepository = SqlAlchemyMasterEntryRepository(_session_stub)
    _campaign_repo: CampaignRepository = SqlAlchemyCampaignRepository(_session_stub)
    _snapshot_repo: SnapshotRepository = SqlAlchemySnapshotRepository(_session_stub)
    _scan_repo: ScanEventRepository = SqlAlchemyScanEventRepository(_session_stub)
    _decision_repo: DecisionRepository = SqlAlchemyDecisionRepository(_session_stub)
