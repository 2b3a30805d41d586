"""Domain error taxonomy.

All of these are raised before any mutation takes place, so callers can rely on
"no partial effect" when catching them. Storage failures are not wrapped and
reach the caller as whatever the adapter raised.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for errors raised by the reconciliation core."""


class ValidationError(DomainError, ValueError):
    """Raised when required input is missing or malformed."""


class NotFoundError(DomainError, LookupError):
    """Raised when a referenced record does not exist."""


class InvalidTransitionError(DomainError):
    """Raised when an operation is not allowed from the record's current state."""
