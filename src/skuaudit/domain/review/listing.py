"""Read models for review screens built from aggregated scans."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from .aggregate import aggregate_scans, matches_sku_filter
from .branches import branch_majorities
from .consensus import DEFAULT_VOTE_FLOOR, RankedProposal, evaluate_consensus

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from skuaudit.domain.model import CampaignSnapshot, CodeTriple, ScanEvent, UpdateDecision

    from .branches import BranchMajority

DEFAULT_MIN_VOTES = 1


class ConsensusFilter(StrEnum):
    ANY = "any"
    WITH = "with"
    WITHOUT = "without"

    def accepts(self, has_consensus: bool) -> bool:  # noqa: FBT001
        if self is ConsensusFilter.WITH:
            return has_consensus
        if self is ConsensusFilter.WITHOUT:
            return not has_consensus
        return True


@dataclass(frozen=True, slots=True)
class ReviewProposal:
    proposal: RankedProposal
    decision: UpdateDecision | None = None

    @property
    def codes(self) -> CodeTriple:
        return self.proposal.codes

    @property
    def count(self) -> int:
        return self.proposal.count


@dataclass(frozen=True, slots=True)
class ReviewItem:
    sku: str
    baseline: CodeTriple | None
    proposals: tuple[ReviewProposal, ...]
    total_votes: int
    consensus_ratio: float
    has_consensus: bool

    @property
    def top_proposal(self) -> ReviewProposal | None:
        return self.proposals[0] if self.proposals else None


@dataclass(frozen=True, slots=True)
class DiscrepancyItem:
    sku: str
    baseline: CodeTriple | None
    total_scans: int
    branches: tuple[str, ...]
    last_seen: datetime | None
    top_proposal: RankedProposal | None
    proposals: tuple[RankedProposal, ...]
    per_branch: tuple[BranchMajority, ...]


def _snapshots_by_sku(snapshots: Iterable[CampaignSnapshot]) -> dict[str, CampaignSnapshot]:
    return {snapshot.sku: snapshot for snapshot in snapshots}


def differs_from_baseline(event: ScanEvent, snapshot: CampaignSnapshot | None) -> bool:
    """A scan differs when its SKU has no snapshot or its assumed codes disagree."""

    return snapshot is None or event.assumed_codes != snapshot.codes


def latest_decisions(
    decisions: Iterable[UpdateDecision],
) -> dict[tuple[str, CodeTriple], UpdateDecision]:
    """Index decisions by ``(sku, new codes)``, keeping the most recent one.

    The newest decision wins whatever order ``decisions`` arrives in, so an
    applied row is shown over the pending one it replaced.
    """

    latest: dict[tuple[str, CodeTriple], UpdateDecision] = {}
    for decision in decisions:
        key = (decision.sku, decision.new_codes)
        current = latest.get(key)
        if current is None or decision.timestamp > current.timestamp:
            latest[key] = decision
    return latest


def build_review_items(  # noqa: PLR0913
    events: Iterable[ScanEvent],
    snapshots: Iterable[CampaignSnapshot],
    decisions: Iterable[UpdateDecision] = (),
    *,
    sku_filter: str | None = None,
    consensus_filter: ConsensusFilter = ConsensusFilter.ANY,
    only_differences: bool = True,
    vote_floor: int = DEFAULT_VOTE_FLOOR,
) -> list[ReviewItem]:
    """Build the per-SKU review listing for one campaign."""

    snapshot_by_sku = _snapshots_by_sku(snapshots)
    decision_index = latest_decisions(decisions)

    selected = [
        event
        for event in events
        if matches_sku_filter(event.sku, sku_filter)
        and (
            not only_differences
            or differs_from_baseline(event, snapshot_by_sku.get(event.sku))
        )
    ]

    items: list[ReviewItem] = []
    for sku, aggregate in aggregate_scans(selected).items():
        verdict = evaluate_consensus(aggregate.proposals.values(), vote_floor=vote_floor)
        if not consensus_filter.accepts(verdict.has_consensus):
            continue
        snapshot = snapshot_by_sku.get(sku)
        items.append(
            ReviewItem(
                sku=sku,
                baseline=snapshot.codes if snapshot else None,
                proposals=tuple(
                    ReviewProposal(
                        proposal=proposal,
                        decision=decision_index.get((sku, proposal.codes)),
                    )
                    for proposal in verdict.ranked
                ),
                total_votes=verdict.total,
                consensus_ratio=verdict.consensus_ratio,
                has_consensus=verdict.has_consensus,
            )
        )
    return items


def build_discrepancy_items(
    events: Iterable[ScanEvent],
    snapshots: Iterable[CampaignSnapshot],
    *,
    sku_filter: str | None = None,
    min_votes: int = DEFAULT_MIN_VOTES,
) -> list[DiscrepancyItem]:
    """Summarise every scanned SKU against its baseline, branch by branch.

    SKUs whose top proposal has fewer than ``min_votes`` votes are left out.
    """

    snapshot_by_sku = _snapshots_by_sku(snapshots)
    items: list[DiscrepancyItem] = []
    for sku, aggregate in aggregate_scans(events, sku_filter=sku_filter).items():
        verdict = evaluate_consensus(aggregate.proposals.values())
        top = verdict.top_proposal
        if (top.count if top else 0) < min_votes:
            continue
        snapshot = snapshot_by_sku.get(sku)
        items.append(
            DiscrepancyItem(
                sku=sku,
                baseline=snapshot.codes if snapshot else None,
                total_scans=aggregate.total,
                branches=aggregate.reporting_branches,
                last_seen=aggregate.last_seen,
                top_proposal=top,
                proposals=verdict.ranked,
                per_branch=branch_majorities(aggregate),
            )
        )
    return items
