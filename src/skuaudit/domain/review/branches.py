"""Cross-branch conflict detection.

Each branch contributes its local majority proposal (highest count, ties go to
the proposal the branch reported first). A SKU is in conflict when those
majorities do not all share one signature.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .aggregate import aggregate_scans

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from skuaudit.domain.model import CodeTriple, ScanEvent

    from .aggregate import BranchTally, SkuAggregate

DEFAULT_MIN_BRANCHES = 2


@dataclass(frozen=True, slots=True)
class BranchVariant:
    codes: CodeTriple
    count: int
    last_seen: datetime | None
    users: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class BranchMajority:
    branch: str
    codes: CodeTriple
    count: int
    last_seen: datetime | None
    users: tuple[str, ...]
    variants: tuple[BranchVariant, ...] = ()

    @property
    def signature(self) -> str:
        return self.codes.key


@dataclass(frozen=True, slots=True)
class BranchConflict:
    sku: str
    conflict: bool
    per_branch_majority: tuple[BranchMajority, ...]
    distinct_signature_count: int


def _variant(tally: BranchTally) -> BranchVariant:
    return BranchVariant(
        codes=tally.codes,
        count=tally.count,
        last_seen=tally.last_seen,
        users=tuple(sorted(tally.contributing_users)),
    )


def branch_majority(branch: str, tallies: Mapping[CodeTriple, BranchTally]) -> BranchMajority:
    """Return the local majority of one branch with the other proposals as variants."""

    ordered = sorted(tallies.values(), key=lambda tally: tally.count, reverse=True)
    if not ordered:
        raise ValueError(f"branch {branch!r} has no votes")
    top = ordered[0]
    return BranchMajority(
        branch=branch,
        codes=top.codes,
        count=top.count,
        last_seen=top.last_seen,
        users=tuple(sorted(top.contributing_users)),
        variants=tuple(_variant(tally) for tally in ordered[1:]),
    )


def branch_majorities(aggregate: SkuAggregate) -> tuple[BranchMajority, ...]:
    return tuple(
        branch_majority(branch, tallies) for branch, tallies in aggregate.branches.items()
    )


def detect_branch_conflict(
    aggregate: SkuAggregate,
    *,
    min_branches: int = DEFAULT_MIN_BRANCHES,
) -> BranchConflict | None:
    """Compare branch majorities for one SKU.

    Returns ``None`` when fewer than ``min_branches`` distinct branches reported.
    """

    if len(aggregate.branches) < min_branches:
        return None
    majorities = branch_majorities(aggregate)
    distinct = {majority.codes for majority in majorities}
    return BranchConflict(
        sku=aggregate.sku,
        conflict=len(distinct) > 1,
        per_branch_majority=majorities,
        distinct_signature_count=len(distinct),
    )


def detect_branch_conflicts(
    events: Iterable[ScanEvent],
    *,
    sku_filter: str | None = None,
    min_branches: int = DEFAULT_MIN_BRANCHES,
) -> list[BranchConflict]:
    """Aggregate ``events`` and report every SKU with enough reporting branches."""

    results: list[BranchConflict] = []
    for aggregate in aggregate_scans(events, sku_filter=sku_filter).values():
        result = detect_branch_conflict(aggregate, min_branches=min_branches)
        if result is not None:
            results.append(result)
    return results
