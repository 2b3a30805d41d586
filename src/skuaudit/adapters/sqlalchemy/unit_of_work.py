"""SQLAlchemy-backed unit of work for the reconciliation workflows.

The adapter keeps one engine and one session factory per process. Call
:func:`startup` once (the application layer does this lazily) and create a
fresh :class:`SqlAlchemyUnitOfWork` per operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from skuaudit.adapters.sqlalchemy.mappings import start_mappers
from skuaudit.adapters.sqlalchemy.migrations import upgrade_head
from skuaudit.adapters.sqlalchemy.repositories import (
    SqlAlchemyCampaignRepository,
    SqlAlchemyDecisionRepository,
    SqlAlchemyMasterEntryRepository,
    SqlAlchemyScanEventRepository,
    SqlAlchemySnapshotRepository,
)
from skuaudit.config import get_database_uri
from skuaudit.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before :func:`startup` or started twice."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def reset(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.session_factory = None

    def require_session_factory(self) -> sessionmaker[Session]:
        if self.session_factory is None:
            raise StartupError(
                "SQLAlchemy adapter not started; call "
                "skuaudit.adapters.sqlalchemy.unit_of_work.startup() first"
            )
        return self.session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
    migrate: bool = True,
) -> None:
    """Create (or adopt) the engine, configure mappers and upgrade the schema."""

    if _STATE.engine is not None and not force:
        raise StartupError("SQLAlchemy adapter already started; pass force=True to rebind")

    resolved_engine = engine or create_engine(database_uri or get_database_uri(), future=True)
    start_mappers()
    if migrate:
        upgrade_head(engine=resolved_engine)
    _STATE.bind(resolved_engine)
    log.info("SQLAlchemy adapter bound to %s", resolved_engine.url.render_as_string())


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it; mostly used by tests."""

    _STATE.reset()


class SqlAlchemyUnitOfWork:
    """One session and one set of repositories per ``with`` block.

    Nothing is written unless :meth:`commit` is called; leaving the block with
    an exception rolls back and lets the exception propagate.
    """

    def __init__(self) -> None:
        self.session_factory = _STATE.require_session_factory()
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already in use")
        session = self.session_factory()
        self._session = session
        self._repositories = CatalogRepositories(
            master_entries=SqlAlchemyMasterEntryRepository(session),
            campaigns=SqlAlchemyCampaignRepository(session),
            snapshots=SqlAlchemySnapshotRepository(session),
            scans=SqlAlchemyScanEventRepository(session),
            decisions=SqlAlchemyDecisionRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Repositories are only available inside the with block")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Session is only available inside the with block")
        return self._session


if TYPE_CHECKING:
    from skuaudit.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyUnitOfWork()
