"""SQLAlchemy adapter package for skuaudit."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCampaignRepository,
    SqlAlchemyDecisionRepository,
    SqlAlchemyMasterEntryRepository,
    SqlAlchemyScanEventRepository,
    SqlAlchemySnapshotRepository,
)

__all__ = [
    "SqlAlchemyCampaignRepository",
    "SqlAlchemyDecisionRepository",
    "SqlAlchemyMasterEntryRepository",
    "SqlAlchemyScanEventRepository",
    "SqlAlchemySnapshotRepository",
    "mapper_registry",
    "start_mappers",
]
