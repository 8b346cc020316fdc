"""SQLAlchemy-backed unit of work for the feed repositories."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from globesync.adapters.sqlalchemy.maintenance import SqlAlchemyStoreMaintenance
from globesync.adapters.sqlalchemy.mappings import start_mappers
from globesync.adapters.sqlalchemy.migrations import upgrade_head
from globesync.adapters.sqlalchemy.repositories import (
    SqlAlchemyOrbitalObjectRepository,
    SqlAlchemySeismicEventRepository,
)
from globesync.config.storage import DEFAULT_DB_TIMEOUT_SECONDS, get_database_config
from globesync.domain.ports.unit_of_work import FeedRepositories

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection
    from types import TracebackType

    from sqlalchemy.engine import Engine
    from sqlalchemy.pool import ConnectionPoolEntry

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the store is used before ``startup`` or reconfigured without ``force``."""


@dataclass(slots=True)
class _StoreState:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def clear(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.sessions = None

    def require_sessions(self) -> sessionmaker[Session]:
        if self.sessions is None:
            raise StartupError(
                "Store not started; call "
                "globesync.adapters.sqlalchemy.unit_of_work.startup() first"
            )
        return self.sessions


_STATE = _StoreState()


def _enable_sqlite_foreign_keys(
    dbapi_connection: SQLiteConnection, _record: ConnectionPoolEntry
) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_store_engine(
    database_uri: str, *, timeout_seconds: float = DEFAULT_DB_TIMEOUT_SECONDS
) -> Engine:
    """Build the engine for ``database_uri``.

    SQLite connections enforce foreign keys so alias rows follow their event and
    wait at most ``timeout_seconds`` for a lock. Server databases wait as long
    for a pool slot and get pre-ping to survive idle disconnects between passes.
    """

    if database_uri.startswith("sqlite"):
        engine = create_engine(
            database_uri, future=True, connect_args={"timeout": timeout_seconds}
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(
        database_uri, future=True, pool_pre_ping=True, pool_timeout=timeout_seconds
    )


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Connect to the store, migrate it to the latest schema and prepare sessions."""

    if _STATE.engine is not None and not force:
        raise StartupError("Store already started. Pass force=True to reconfigure.")

    if engine is None:
        database = get_database_config()
        engine = create_store_engine(
            database_uri or database.uri, timeout_seconds=database.timeout_seconds
        )
    resolved_engine = engine
    start_mappers()
    upgrade_head(engine=resolved_engine)
    if _STATE.engine is not None and _STATE.engine is not resolved_engine:
        _STATE.engine.dispose()
    _STATE.bind(resolved_engine)
    log.info("Store ready at %s", resolved_engine.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it; ``startup`` may be called again afterwards."""

    _STATE.clear()


def store_maintenance() -> SqlAlchemyStoreMaintenance:
    if _STATE.engine is None:
        raise StartupError("Store not started; maintenance needs an engine")
    return SqlAlchemyStoreMaintenance(_STATE.engine)


class SqlAlchemyUnitOfWork:
    """One session over the orbital and seismic repositories.

    Leaving the context with an exception rolls back; a clean exit without
    ``commit`` discards pending changes when the session closes.
    """

    def __init__(self, sessions: sessionmaker[Session] | None = None) -> None:
        self._sessions = sessions or _STATE.require_sessions()
        self._session: Session | None = None
        self._repositories: FeedRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already in use")
        session = self._sessions()
        self._session = session
        self._repositories = FeedRepositories(
            orbital_objects=SqlAlchemyOrbitalObjectRepository(session),
            seismic_events=SqlAlchemySeismicEventRepository(session),
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

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its context")
        return self._session

    @property
    def repositories(self) -> FeedRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its context")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from globesync.domain.ports.unit_of_work import FeedUnitOfWork

    _uow_check: FeedUnitOfWork = SqlAlchemyUnitOfWork()
