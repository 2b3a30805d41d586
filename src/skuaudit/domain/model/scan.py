"""Field observations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from skuaudit.domain.model.entity import Entity, utcnow
from skuaudit.domain.model.enums import ScanStatus
from skuaudit.domain.model.primitives import CodeTriple

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from skuaudit.domain.model.primitives import Code, Sku


@dataclass(eq=False, kw_only=True)
class ScanEvent(Entity):
    """One scan submitted by field staff. Append-only.

    ``assumed_*`` codes hold the operator's suggestion when one was given and
    the snapshot code otherwise; they are what consensus is computed on.
    """

    campaign_id: UUID
    sku: Sku
    branch: str | None = None
    submitter_email: str | None = None
    status: ScanStatus = ScanStatus.OK
    suggested_category_code: Code | None = None
    suggested_type_code: Code | None = None
    suggested_classification_code: Code | None = None
    assumed_category_code: Code | None = None
    assumed_type_code: Code | None = None
    assumed_classification_code: Code | None = None
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def assumed_codes(self) -> CodeTriple:
        return CodeTriple.of(
            self.assumed_category_code,
            self.assumed_type_code,
            self.assumed_classification_code,
        )

    @property
    def suggested_codes(self) -> CodeTriple:
        return CodeTriple.of(
            self.suggested_category_code,
            self.suggested_type_code,
            self.suggested_classification_code,
        )
