"""Alembic entry points for the schema migrations bundled with the adapter."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from skuaudit.config import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent
VERSIONS_PATH: Final[Path] = MIGRATIONS_PATH / "versions"

log = getLogger(__name__)


def alembic_config(*, database_uri: str | None = None) -> Config:
    """Return an in-memory Alembic config pointing at the bundled scripts.

    No ``alembic.ini`` is involved, so the same config works from a source
    checkout and from an installed wheel.
    """

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    config.set_main_option("version_locations", str(VERSIONS_PATH))
    if database_uri:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Upgrade the database schema to the latest revision.

    With an ``engine`` the migration runs on one of its connections inside a
    single transaction; otherwise ``env.py`` opens its own connection.
    """

    if engine is None:
        command.upgrade(alembic_config(database_uri=database_uri or get_database_uri()), "head")
        return

    config = alembic_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
    log.debug("Schema at %s for %s", head_revision(), engine.url.render_as_string())


def head_revision() -> str | None:
    return ScriptDirectory.from_config(alembic_config()).get_current_head()


def current_revision(engine: Engine) -> str | None:
    with engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()
