"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ScanStatus(StrEnum):
    OK = "OK"
    NEEDS_REVIEW = "NEEDS_REVIEW"
    NOT_IN_MASTER = "NOT_IN_MASTER"


class DecisionStatus(StrEnum):
    PENDING = "pending"
    APPLIED = "applied"
    REJECTED = "rejected"


class Verdict(StrEnum):
    """Operator verdict on a proposal."""

    ACCEPT = "accept"
    REJECT = "reject"
