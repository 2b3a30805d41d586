"""Update decisions: the audit trail of accept/reject/apply/revert actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from skuaudit.domain.model.entity import Entity, utcnow
from skuaudit.domain.model.enums import DecisionStatus
from skuaudit.domain.model.primitives import CodeTriple

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from skuaudit.domain.model.primitives import Code, Sku


@dataclass(eq=False, kw_only=True)
class UpdateDecision(Entity):
    """One decision about the codes of a SKU within a campaign.

    Rows are only touched for status/archival transitions and ``applied_at``
    stamping. ``old_*`` is the baseline before the change and may be ``None``
    when the SKU had no snapshot.
    """

    campaign_id: UUID
    sku: Sku
    new_category_code: Code
    new_type_code: Code
    new_classification_code: Code
    old_category_code: Code | None = None
    old_type_code: Code | None = None
    old_classification_code: Code | None = None
    status: DecisionStatus = DecisionStatus.PENDING
    archived: bool = False
    archived_at: datetime | None = None
    archived_by: str | None = None
    decided_by: str | None = None
    decided_at: datetime | None = None
    applied_at: datetime | None = None
    notes: str = ""
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def new_codes(self) -> CodeTriple:
        return CodeTriple.of(
            self.new_category_code,
            self.new_type_code,
            self.new_classification_code,
        )

    @property
    def old_codes(self) -> CodeTriple | None:
        olds = (self.old_category_code, self.old_type_code, self.old_classification_code)
        if all(value is None for value in olds):
            return None
        return CodeTriple.of(*olds)

    @property
    def is_active_pending(self) -> bool:
        return self.status is DecisionStatus.PENDING and not self.archived

    def mark_applied(self, *, by: str | None, at: datetime) -> None:
        self.status = DecisionStatus.APPLIED
        self.decided_by = by or self.decided_by
        self.decided_at = at
        self.applied_at = at

    def set_archived(self, archived: bool, *, by: str | None, at: datetime) -> None:  # noqa: FBT001
        self.archived = archived
        self.archived_by = by
        self.archived_at = at
