"""Embedded DuckDB connection helpers."""

from __future__ import annotations

import duckdb
import pyarrow as pa

from .config import EngineSettings

IPC_VIEW_NAME = "pqview_ipc_source"


def open_connection(settings: EngineSettings) -> duckdb.DuckDBPyConnection:
    """Return a fresh in-memory connection tuned from ``settings``."""
    connection = duckdb.connect(database=":memory:")
    try:
        if settings.threads:
            connection.execute(f"PRAGMA threads={int(settings.threads)};")
        if settings.memory_limit:
            connection.execute(f"PRAGMA memory_limit={quote_literal(settings.memory_limit)};")
    except duckdb.Error:
        connection.close()
        raise
    return connection


def register_ipc_table(connection: duckdb.DuckDBPyConnection, table: pa.Table) -> str:
    """Expose an Arrow table to SQL and return the view name it is bound to."""
    connection.register(IPC_VIEW_NAME, table)
    return IPC_VIEW_NAME


def quote_literal(value: str) -> str:
    """Render ``value`` as a single-quoted SQL string literal."""
    return "'" + value.replace("'", "''") + "'"
