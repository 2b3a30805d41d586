"""Public domain model surface."""

from __future__ import annotations

from skuaudit.domain.model.catalog import Campaign, CampaignSnapshot, MasterEntry
from skuaudit.domain.model.decision import UpdateDecision
from skuaudit.domain.model.entity import Entity, new_id, utcnow
from skuaudit.domain.model.enums import DecisionStatus, ScanStatus, Verdict
from skuaudit.domain.model.primitives import (
    SIGNATURE_DELIMITER,
    Code,
    CodeTriple,
    Sku,
    canonical_code,
    clean_sku,
    signature,
)
from skuaudit.domain.model.scan import ScanEvent

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    "utcnow",
    # catalog
    "Campaign",
    "CampaignSnapshot",
    "MasterEntry",
    # observations
    "ScanEvent",
    # workflow
    "UpdateDecision",
    # enums
    "DecisionStatus",
    "ScanStatus",
    "Verdict",
    # primitives
    "SIGNATURE_DELIMITER",
    "Code",
    "CodeTriple",
    "Sku",
    "canonical_code",
    "clean_sku",
    "signature",
]
