"""Consensus evaluation over a SKU's proposal tallies."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from skuaudit.domain.model import CodeTriple

    from .aggregate import ProposalTally

DEFAULT_VOTE_FLOOR = 2
_TWO_PLACES = Decimal("0.01")


def ratio(part: int, total: int) -> float:
    """Return ``part / max(1, total)`` rounded half-up to two decimals."""

    value = Decimal(part) / Decimal(max(1, total))
    return float(value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class RankedProposal:
    codes: CodeTriple
    count: int
    share: float
    users: tuple[str, ...] = ()
    branches: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return self.codes.key


@dataclass(frozen=True, slots=True)
class ConsensusVerdict:
    top_proposal: RankedProposal | None
    consensus_ratio: float
    has_consensus: bool
    ranked: tuple[RankedProposal, ...]
    total: int

    @property
    def runner_up(self) -> RankedProposal | None:
        return self.ranked[1] if len(self.ranked) > 1 else None


def rank_tallies(tallies: Iterable[ProposalTally]) -> list[ProposalTally]:
    """Sort by count descending; ``sorted`` is stable so ties keep input order."""

    return sorted(tallies, key=lambda tally: tally.count, reverse=True)


def evaluate_consensus(
    tallies: Iterable[ProposalTally],
    *,
    vote_floor: int = DEFAULT_VOTE_FLOOR,
) -> ConsensusVerdict:
    """Determine the majority proposal and whether it has consensus.

    Consensus requires the top proposal to reach ``vote_floor`` votes and to
    strictly beat the runner-up. A tie at the top is never consensus, and a
    single vote never is with the default floor of two.
    """

    ordered = rank_tallies(tallies)
    total = sum(tally.count for tally in ordered)
    ranked = tuple(
        RankedProposal(
            codes=tally.codes,
            count=tally.count,
            share=ratio(tally.count, total),
            users=tuple(sorted(tally.contributing_users)),
            branches=tuple(sorted(tally.contributing_branches)),
        )
        for tally in ordered
    )
    if not ranked:
        return ConsensusVerdict(
            top_proposal=None,
            consensus_ratio=0.0,
            has_consensus=False,
            ranked=(),
            total=0,
        )

    top = ranked[0]
    second_count = ranked[1].count if len(ranked) > 1 else 0
    return ConsensusVerdict(
        top_proposal=top,
        consensus_ratio=ratio(top.count, total),
        has_consensus=top.count >= vote_floor and top.count > second_count,
        ranked=ranked,
        total=total,
    )
