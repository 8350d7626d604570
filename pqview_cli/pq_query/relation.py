"""Binding a loaded file to the engine as a queryable relation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import duckdb
import pyarrow as pa
import pyarrow.ipc

from pqview_cli.shared.engine import quote_literal, register_ipc_table
from pqview_cli.shared.exceptions import FileReadError

from .types import FileHandle, FileKind


@dataclass(frozen=True, slots=True)
class BoundRelation:
    """A FileHandle plus the SQL source expression that reads it.

    Arrow IPC files are read once with pyarrow and registered on the session
    connection, so ``arrow_schema`` and the batch/row counts come straight
    from the file rather than from the engine.
    """

    handle: FileHandle
    source_sql: str
    arrow_schema: pa.Schema | None = None
    batch_count: int | None = None
    total_rows: int | None = None

    @property
    def replacement_sql(self) -> str:
        """Parenthesised expression substituted for the placeholder."""
        return f"(SELECT * FROM {self.source_sql})"


def parquet_source_sql(path: Path) -> str:
    return f"read_parquet({quote_literal(str(path))})"


def bind_relation(handle: FileHandle, connection: duckdb.DuckDBPyConnection) -> BoundRelation:
    """Dispatch once on the file kind and expose the file to ``connection``."""
    if handle.kind is FileKind.PARQUET:
        return BoundRelation(handle=handle, source_sql=parquet_source_sql(handle.path))

    table, batch_count = read_ipc_table(handle.path)
    try:
        view_name = register_ipc_table(connection, table)
    except duckdb.Error as exc:
        raise FileReadError(f"Failed to load Arrow file: {exc}") from exc
    return BoundRelation(
        handle=handle,
        source_sql=view_name,
        arrow_schema=table.schema,
        batch_count=batch_count,
        total_rows=table.num_rows,
    )


def read_ipc_table(path: Path) -> tuple[pa.Table, int]:
    """Read an Arrow IPC file (random-access or streaming layout)."""
    try:
        with pa.OSFile(str(path), "rb") as source:
            reader = pa.ipc.open_file(source)
            return reader.read_all(), reader.num_record_batches
    except pa.ArrowInvalid:
        pass
    except (pa.ArrowException, OSError) as exc:
        raise FileReadError(f"Failed to load Arrow file: {exc}") from exc

    # Not a random-access file; retry as an IPC stream.
    try:
        with pa.OSFile(str(path), "rb") as source:
            reader = pa.ipc.open_stream(source)
            batches = list(reader)
            return pa.Table.from_batches(batches, schema=reader.schema), len(batches)
    except (pa.ArrowException, OSError) as exc:
        raise FileReadError(f"Failed to load Arrow file: {exc}") from exc
