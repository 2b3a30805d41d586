"""Scan aggregation: one fold over a campaign's scan events.

Events are grouped per SKU. Each SKU accumulates a global tally per proposal
(keyed by the ``CodeTriple`` of the event's assumed codes) and, for events
that carry a branch, a per-branch tally per proposal. Dict insertion order is
the first-encountered order, which downstream ranking relies on for ties.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import reduce
from typing import TYPE_CHECKING

from skuaudit.domain.model import CodeTriple

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from skuaudit.domain.model import ScanEvent


def _later(current: datetime | None, candidate: datetime) -> datetime:
    return candidate if current is None or candidate > current else current


@dataclass(slots=True)
class ProposalTally:
    """Votes for one proposal of one SKU across all branches."""

    codes: CodeTriple
    count: int = 0
    contributing_users: set[str] = field(default_factory=set[str])
    contributing_branches: set[str] = field(default_factory=set[str])

    @property
    def signature(self) -> str:
        return self.codes.key


@dataclass(slots=True)
class BranchTally:
    """Votes for one proposal of one SKU within a single branch."""

    codes: CodeTriple
    count: int = 0
    last_seen: datetime | None = None
    contributing_users: set[str] = field(default_factory=set[str])


@dataclass(slots=True)
class SkuAggregate:
    """Accumulator for every scan of a single SKU."""

    sku: str
    proposals: dict[CodeTriple, ProposalTally] = field(
        default_factory=dict[CodeTriple, ProposalTally]
    )
    branches: dict[str, dict[CodeTriple, BranchTally]] = field(
        default_factory=dict[str, dict[CodeTriple, BranchTally]]
    )
    total: int = 0
    last_seen: datetime | None = None

    @property
    def reporting_branches(self) -> tuple[str, ...]:
        return tuple(self.branches)

    def add(self, event: ScanEvent) -> SkuAggregate:
        codes = event.assumed_codes

        tally = self.proposals.get(codes)
        if tally is None:
            tally = self.proposals[codes] = ProposalTally(codes=codes)
        tally.count += 1
        if event.submitter_email:
            tally.contributing_users.add(event.submitter_email)
        if event.branch:
            tally.contributing_branches.add(event.branch)
            self._add_branch_vote(event.branch, codes, event)

        self.total += 1
        self.last_seen = _later(self.last_seen, event.timestamp)
        return self

    def _add_branch_vote(self, branch: str, codes: CodeTriple, event: ScanEvent) -> None:
        per_branch = self.branches.setdefault(branch, {})
        tally = per_branch.get(codes)
        if tally is None:
            tally = per_branch[codes] = BranchTally(codes=codes)
        tally.count += 1
        tally.last_seen = _later(tally.last_seen, event.timestamp)
        if event.submitter_email:
            tally.contributing_users.add(event.submitter_email)


def matches_sku_filter(sku: str, sku_filter: str | None) -> bool:
    """Case-insensitive substring match; an empty filter matches everything."""

    needle = (sku_filter or "").strip().upper()
    return not needle or needle in str(sku).upper()


def _fold(aggregates: dict[str, SkuAggregate], event: ScanEvent) -> dict[str, SkuAggregate]:
    aggregate = aggregates.get(event.sku)
    if aggregate is None:
        aggregate = aggregates[event.sku] = SkuAggregate(sku=event.sku)
    aggregate.add(event)
    return aggregates


def aggregate_scans(
    events: Iterable[ScanEvent],
    *,
    sku_filter: str | None = None,
) -> dict[str, SkuAggregate]:
    """Group ``events`` by SKU, returning one accumulator per SKU that has events."""

    selected = (event for event in events if matches_sku_filter(event.sku, sku_filter))
    return reduce(_fold, selected, {})
