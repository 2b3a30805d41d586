"""Root logger setup for the skuaudit command line."""

from __future__ import annotations

import logging

# Loggers that are chatty at INFO and only interesting when debugging.
_NOISY_LOGGERS = ("alembic.runtime.migration", "sqlalchemy.engine")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Configure the root logger once for CLI output.

    Below DEBUG the migration runner and the SQL engine are held at WARNING so
    that every command does not start with schema chatter.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
    quiet = level > logging.DEBUG
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING if quiet else logging.NOTSET)
