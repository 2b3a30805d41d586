"""Typed readers for optional environment variables."""

from __future__ import annotations

import os

from .errors import ConfigurationError


def _raw(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def str_env_var(name: str, default: str) -> str:
    """Return a stripped string variable; blank counts as unset."""

    return _raw(name) or default


def int_env_var(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = _raw(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if minimum is not None and value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value
