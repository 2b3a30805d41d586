"""Review and workflow defaults."""

from __future__ import annotations

from dataclasses import dataclass

from skuaudit.domain.decisions import DEFAULT_ACTOR
from skuaudit.domain.review import (
    DEFAULT_MIN_BRANCHES,
    DEFAULT_MIN_VOTES,
    DEFAULT_VOTE_FLOOR,
)

from .env import int_env_var, str_env_var


@dataclass(frozen=True, slots=True)
class ReviewConfig:
    min_branches: int = DEFAULT_MIN_BRANCHES
    min_votes: int = DEFAULT_MIN_VOTES
    vote_floor: int = DEFAULT_VOTE_FLOOR
    default_actor: str = DEFAULT_ACTOR


def get_review_config() -> ReviewConfig:
    return ReviewConfig(
        min_branches=int_env_var("SKUAUDIT_MIN_BRANCHES", DEFAULT_MIN_BRANCHES, minimum=1),
        min_votes=int_env_var("SKUAUDIT_MIN_VOTES", DEFAULT_MIN_VOTES, minimum=1),
        vote_floor=int_env_var("SKUAUDIT_CONSENSUS_FLOOR", DEFAULT_VOTE_FLOOR, minimum=1),
        default_actor=str_env_var("SKUAUDIT_DEFAULT_ACTOR", DEFAULT_ACTOR),
    )
