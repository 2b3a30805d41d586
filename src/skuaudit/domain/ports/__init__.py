"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    CampaignRepository,
    DecisionRepository,
    MasterEntryRepository,
    Repository,
    ScanEventRepository,
    SnapshotRepository,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CampaignRepository",
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "DecisionRepository",
    "MasterEntryRepository",
    "Repository",
    "RepositoryCollection",
    "ScanEventRepository",
    "SnapshotRepository",
    "UnitOfWork",
]
