from __future__ import annotations

import pytest

from skuaudit.domain.model import CodeTriple
from skuaudit.domain.review import (
    ProposalTally,
    aggregate_scans,
    detect_branch_conflict,
    evaluate_consensus,
    ratio,
)
from tests.helpers.catalog import make_scan

SKU = "ABC123"


def _tally(category: str, count: int) -> ProposalTally:
    return ProposalTally(codes=CodeTriple(category, "02", "03"), count=count)


def test_unanimous_proposal_across_branches() -> None:
    events = [
        make_scan(SKU, ("02", "02", "03"), branch="X"),
        make_scan(SKU, ("02", "02", "03"), branch="X", minutes=1),
        make_scan(SKU, ("02", "02", "03"), branch="Y", minutes=2),
    ]
    aggregate = aggregate_scans(events)[SKU]

    verdict = evaluate_consensus(aggregate.proposals.values())

    assert verdict.top_proposal is not None
    assert verdict.top_proposal.codes.category == "02"
    assert verdict.top_proposal.count == 3
    assert verdict.consensus_ratio == 1.0
    assert verdict.has_consensus
    assert verdict.runner_up is None

    conflict = detect_branch_conflict(aggregate)
    assert conflict is not None
    assert not conflict.conflict
    counts = {majority.branch: majority.count for majority in conflict.per_branch_majority}
    assert counts == {"X": 2, "Y": 1}


def test_strict_majority_has_consensus() -> None:
    verdict = evaluate_consensus([_tally("02", 2), _tally("03", 1)])

    assert verdict.has_consensus
    assert verdict.consensus_ratio == 0.67
    assert verdict.runner_up is not None
    assert verdict.runner_up.codes.category == "03"


def test_tie_at_the_top_never_has_consensus() -> None:
    verdict = evaluate_consensus([_tally("02", 2), _tally("03", 2)])

    assert not verdict.has_consensus
    assert verdict.consensus_ratio == 0.5


def test_single_vote_is_below_the_floor() -> None:
    verdict = evaluate_consensus([_tally("02", 1)])

    assert not verdict.has_consensus
    assert verdict.consensus_ratio == 1.0


def test_vote_floor_is_configurable() -> None:
    assert evaluate_consensus([_tally("02", 1)], vote_floor=1).has_consensus
    assert not evaluate_consensus([_tally("02", 2)], vote_floor=3).has_consensus


def test_ties_keep_first_encountered_order() -> None:
    verdict = evaluate_consensus([_tally("05", 1), _tally("02", 3), _tally("04", 1)])

    assert [proposal.codes.category for proposal in verdict.ranked] == ["02", "05", "04"]
    assert [proposal.share for proposal in verdict.ranked] == [0.6, 0.2, 0.2]


def test_no_tallies_yield_an_empty_verdict() -> None:
    verdict = evaluate_consensus([])

    assert verdict.top_proposal is None
    assert verdict.total == 0
    assert verdict.consensus_ratio == 0.0
    assert not verdict.has_consensus


@pytest.mark.parametrize(
    ("part", "total", "expected"),
    [(1, 3, 0.33), (2, 3, 0.67), (1, 8, 0.13), (0, 0, 0.0), (5, 5, 1.0)],
)
def test_ratio_rounds_half_up_to_two_places(part: int, total: int, expected: float) -> None:
    assert ratio(part, total) == expected
