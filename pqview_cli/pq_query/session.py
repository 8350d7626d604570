"""Session lifecycle for pq-query: load, query, replace.

A :class:`Session` is an immutable snapshot of one loaded file. The engine
connection and bound relation that produced it live next to it in an
:class:`OpenSession`, which is the unit that gets torn down when another file
is loaded.

:class:`SessionController` runs loads and queries on a background worker and
publishes results through a ``dispatch`` hook so a UI thread can receive them.
It allows at most one outstanding query per session, and every completion is
checked against the session id it was issued for, so a result that arrives
after a reload is dropped instead of overwriting the new session.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable

import duckdb

from pqview_cli.shared.config import AppConfig
from pqview_cli.shared.engine import open_connection
from pqview_cli.shared.exceptions import FileReadError, QueryError, QueryInFlightError, QuerySyntaxError
from pqview_cli.shared.logging import Logger, get_logger

from . import executor, probes
from .files import detect_kind, load_file
from .relation import BoundRelation, bind_relation
from .types import Session

Dispatch = Callable[[Callable[[], None]], None]
Callback = Callable[["Future[Session | None]"], None]


@dataclass(slots=True)
class OpenSession:
    """A Session together with the resources it exclusively owns."""

    session: Session
    relation: BoundRelation
    connection: duckdb.DuckDBPyConnection
    pending: Future | None = None
    retired: bool = False

    def close(self) -> None:
        self.connection.close()


def open_session(path: str | Path, config: AppConfig, *, session_id: int = 1) -> OpenSession:
    """Load ``path`` into a fresh connection and run the default query.

    Either a complete session comes back or FileReadError is raised; a partly
    initialised connection is never left behind.
    """
    handle = load_file(path)
    try:
        connection = open_connection(config.engine)
    except duckdb.Error as exc:
        raise FileReadError(f"Unable to start the query engine: {exc}") from exc

    try:
        relation = bind_relation(handle, connection)
        file_schema = probes.describe_relation(relation, connection)
        metadata = probes.describe_metadata(relation, connection, column_count=len(file_schema))
    except Exception:
        connection.close()
        raise

    session = Session(
        session_id=session_id,
        handle=handle,
        file_schema=file_schema,
        metadata=metadata,
    )
    live = OpenSession(session=session, relation=relation, connection=connection)
    statement = executor.default_query(config.query.placeholder, config.preview.row_limit)
    live.session = execute_statement(live, statement, config)
    return live


def execute_statement(live: OpenSession, statement: str, config: AppConfig) -> Session:
    """Run ``statement`` against ``live`` and return the successor Session.

    On success the result, resolved SQL and statement are replaced together and
    any previous error is cleared. On failure only ``error`` changes, so the
    last good result stays on screen.
    """
    current = live.session
    try:
        result, resolved_sql = executor.run_statement(
            statement,
            live.relation,
            live.connection,
            limit=config.preview.row_limit,
            placeholder=config.query.placeholder,
        )
    except QuerySyntaxError as exc:
        return replace(current, error=str(exc), last_statement=statement)
    return replace(
        current,
        result=result,
        error=None,
        last_statement=statement,
        resolved_sql=resolved_sql,
    )


def _call_directly(callback: Callable[[], None]) -> None:
    callback()


class SessionController:
    """Owns the current session and serialises work against it."""

    def __init__(
        self,
        config: AppConfig,
        *,
        logger: Logger | None = None,
        dispatch: Dispatch | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or get_logger()
        self._dispatch = dispatch or _call_directly
        # One worker for queries, one for loads, so a reload never waits behind a slow query.
        self._pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="pqview")
        self._lock = threading.Lock()
        self._generation = 0
        self._live: OpenSession | None = None
        self._closed = False

    # ------------------------------------------------------------------
    # Public API

    @property
    def current(self) -> Session | None:
        with self._lock:
            return self._live.session if self._live else None

    @property
    def query_in_flight(self) -> bool:
        with self._lock:
            return bool(self._live and self._live.pending is not None)

    def load(self, path: str | Path, callback: Callback | None = None) -> Future[Session | None]:
        """Start loading ``path``.

        Resolves to the new Session, or None once a newer load has been issued
        (even if this one failed). A failed load that is still the latest
        raises FileReadError and leaves the current session in place.
        """
        detect_kind(path)  # reject unsupported files before any I/O
        with self._lock:
            self._ensure_open()
            self._generation += 1
            tag = self._generation
            future = self._pool.submit(self._load_worker, Path(path), tag)
        self._attach(future, callback)
        return future

    def run(self, statement: str, callback: Callback | None = None) -> Future[Session | None]:
        """Start a query; resolves to the updated Session, or None if the file was replaced."""
        with self._lock:
            self._ensure_open()
            live = self._live
            if live is None:
                raise QueryError("No file is loaded.")
            if live.pending is not None:
                raise QueryInFlightError("A query is already running for this file.")
            future = self._pool.submit(self._run_worker, live, statement, live.session.session_id)
            live.pending = future
        self._attach(future, callback)
        return future

    def close(self) -> None:
        """Stop the worker and release the current connection."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._pool.shutdown(wait=True)
        with self._lock:
            live, self._live = self._live, None
        if live is not None:
            live.close()

    def __enter__(self) -> SessionController:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Workers

    def _load_worker(self, path: Path, tag: int) -> Session | None:
        try:
            live = open_session(path, self._config, session_id=tag)
        except FileReadError as exc:
            if not self._is_stale(tag):
                raise
            self._logger.session(tag, f"load of {path} failed after a newer file was selected: {exc}")
            return None

        previous: OpenSession | None = None
        with self._lock:
            stale = tag != self._generation or self._closed
            if not stale:
                previous, self._live = self._live, live
        if stale:
            self._logger.session(tag, f"discarding load of {path}; a newer file was selected.")
            live.close()
            return None

        if previous is not None:
            self._retire(previous)
        self._logger.session(tag, f"bound to {live.session.handle.path}")
        self._logger.sql("Preview SQL", live.session.resolved_sql)
        return live.session

    def _run_worker(self, live: OpenSession, statement: str, tag: int) -> Session | None:
        try:
            successor = execute_statement(live, statement, self._config)
        finally:
            with self._lock:
                live.pending = None
                is_current = self._live is live and live.session.session_id == tag
                close_now = live.retired
            if close_now:
                live.close()

        if not is_current:
            self._logger.session(tag, "dropping query result; the file was replaced.")
            return None

        with self._lock:
            if self._live is not live:
                return None
            live.session = successor
        if successor.error:
            self._logger.session(tag, f"query failed: {successor.error}")
        else:
            self._logger.sql("Resolved SQL", successor.resolved_sql)
        return successor

    # ------------------------------------------------------------------
    # Helpers

    def _retire(self, previous: OpenSession) -> None:
        # A query still running on the old connection closes it when it finishes.
        with self._lock:
            previous.retired = True
            busy = previous.pending is not None
        if not busy:
            previous.close()

    def _attach(self, future: Future, callback: Callback | None) -> None:
        if callback is None:
            return
        future.add_done_callback(lambda done: self._dispatch(lambda: callback(done)))

    def _is_stale(self, tag: int) -> bool:
        with self._lock:
            return tag != self._generation or self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise QueryError("Session controller is closed.")
