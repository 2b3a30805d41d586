"""Ports for persisting domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

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


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent record store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class MasterEntryRepository(Repository[MasterEntry], Protocol):
    """Persistence contract for the master catalog."""

    def get(self, sku: str) -> MasterEntry | None: ...

    def list_all(self) -> Sequence[MasterEntry]: ...


@runtime_checkable
class CampaignRepository(Repository[Campaign], Protocol):
    """Persistence contract for campaigns."""

    def get(self, campaign_id: UUID) -> Campaign | None: ...

    def list_all(self) -> Sequence[Campaign]: ...

    def active(self) -> Campaign | None: ...

    def deactivate_all(self) -> None: ...


@runtime_checkable
class SnapshotRepository(Repository[CampaignSnapshot], Protocol):
    """Persistence contract for per-campaign catalog snapshots."""

    def add_many(self, snapshots: Iterable[CampaignSnapshot]) -> None: ...

    def get(self, campaign_id: UUID, sku: str) -> CampaignSnapshot | None: ...

    def for_campaign(self, campaign_id: UUID) -> Sequence[CampaignSnapshot]: ...


@runtime_checkable
class ScanEventRepository(Repository[ScanEvent], Protocol):
    """Persistence contract for scan events."""

    def for_campaign(
        self,
        campaign_id: UUID,
        *,
        sku_contains: str | None = None,
    ) -> Sequence[ScanEvent]: ...


@runtime_checkable
class DecisionRepository(Repository[UpdateDecision], Protocol):
    """Persistence contract for update decisions.

    ``query`` returns newest first (by ``timestamp``).
    """

    def get(self, decision_id: UUID) -> UpdateDecision | None: ...

    def get_many(self, decision_ids: Sequence[UUID]) -> Sequence[UpdateDecision]: ...

    def query(
        self,
        campaign_id: UUID,
        *,
        sku: str | None = None,
        status: DecisionStatus | None = None,
        archived: bool | None = None,
    ) -> Sequence[UpdateDecision]: ...

    def remove(self, entity: UpdateDecision) -> None: ...
