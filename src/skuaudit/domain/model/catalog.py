"""Catalog-of-record entities: master entries, campaigns and their snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from skuaudit.domain.model.entity import Entity
from skuaudit.domain.model.primitives import CodeTriple, canonical_code

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from skuaudit.domain.model.primitives import Code, Sku


@dataclass(eq=False, kw_only=True)
class MasterEntry:
    """One SKU in the master catalog. Upserted, never deleted."""

    sku: Sku
    description: str = ""
    category_code: Code = ""
    type_code: Code = ""
    classification_code: Code = ""
    updated_at: datetime | None = None

    @property
    def codes(self) -> CodeTriple:
        return CodeTriple.of(self.category_code, self.type_code, self.classification_code)

    def apply_codes(self, codes: CodeTriple, *, at: datetime | None = None) -> None:
        self.category_code = codes.category
        self.type_code = codes.type
        self.classification_code = codes.classification
        self.updated_at = at


@dataclass(eq=False, kw_only=True)
class Campaign(Entity):
    name: str
    start: datetime
    end: datetime
    category_target: Code | None = None
    type_target: Code | None = None
    classification_target: Code | None = None
    active: bool = False

    def meets_targets(self, codes: CodeTriple) -> bool:
        """Return whether ``codes`` satisfy every target set on this campaign."""

        pairs = (
            (self.category_target, codes.category),
            (self.type_target, codes.type),
            (self.classification_target, codes.classification),
        )
        return all(
            not target or canonical_code(actual) == canonical_code(target)
            for target, actual in pairs
        )


@dataclass(eq=False, kw_only=True)
class CampaignSnapshot:
    """Copy of a master entry's codes taken when a campaign is created.

    Keyed by ``(campaign_id, sku)``. Nothing in the domain mutates a snapshot
    after creation; it is the baseline for proposals and decisions.
    """

    campaign_id: UUID
    sku: Sku
    description: str = ""
    category_code: Code = ""
    type_code: Code = ""
    classification_code: Code = ""

    @classmethod
    def of_entry(cls, campaign_id: UUID, entry: MasterEntry) -> CampaignSnapshot:
        return cls(
            campaign_id=campaign_id,
            sku=entry.sku,
            description=entry.description,
            category_code=entry.category_code,
            type_code=entry.type_code,
            classification_code=entry.classification_code,
        )

    @property
    def codes(self) -> CodeTriple:
        return CodeTriple.of(self.category_code, self.type_code, self.classification_code)
