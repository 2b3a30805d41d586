"""Discrepancy aggregation and consensus read models.

Everything in this package is a pure function over records that were already
fetched: no repository access, no shared mutable state.
"""

from __future__ import annotations

from .aggregate import (
    BranchTally,
    ProposalTally,
    SkuAggregate,
    aggregate_scans,
    matches_sku_filter,
)
from .branches import (
    DEFAULT_MIN_BRANCHES,
    BranchConflict,
    BranchMajority,
    BranchVariant,
    branch_majorities,
    detect_branch_conflict,
    detect_branch_conflicts,
)
from .consensus import (
    DEFAULT_VOTE_FLOOR,
    ConsensusVerdict,
    RankedProposal,
    evaluate_consensus,
    ratio,
)
from .listing import (
    DEFAULT_MIN_VOTES,
    ConsensusFilter,
    DiscrepancyItem,
    ReviewItem,
    ReviewProposal,
    build_discrepancy_items,
    build_review_items,
    differs_from_baseline,
    latest_decisions,
)

__all__ = [
    "DEFAULT_MIN_BRANCHES",
    "DEFAULT_MIN_VOTES",
    "DEFAULT_VOTE_FLOOR",
    "BranchConflict",
    "BranchMajority",
    "BranchTally",
    "BranchVariant",
    "ConsensusFilter",
    "ConsensusVerdict",
    "DiscrepancyItem",
    "ProposalTally",
    "RankedProposal",
    "ReviewItem",
    "ReviewProposal",
    "SkuAggregate",
    "aggregate_scans",
    "branch_majorities",
    "build_discrepancy_items",
    "build_review_items",
    "detect_branch_conflict",
    "detect_branch_conflicts",
    "differs_from_baseline",
    "evaluate_consensus",
    "latest_decisions",
    "matches_sku_filter",
    "ratio",
]
