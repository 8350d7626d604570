"""Schema and metadata introspection for pq-query."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import duckdb

from pqview_cli.shared.engine import quote_literal
from pqview_cli.shared.exceptions import FileReadError, QuerySyntaxError
from pqview_cli.shared.utils import format_file_size

from .relation import BoundRelation
from .types import Column, FileKind, MetadataRow, Schema

IPC_FORMAT_LABEL = "Apache Arrow IPC"

# (engine column, display key) in display order; File Size and Total Columns
# are local facts slotted in after Created By.
_PARQUET_FILE_FIELDS: tuple[tuple[str, str], ...] = (
    ("created_by", "Created By"),
    ("num_rows", "Total Rows"),
    ("num_row_groups", "Total Row Groups"),
    ("format_version", "Format Version"),
    ("encryption_algorithm", "Encryption Algorithm"),
)


def describe_relation(relation: BoundRelation, connection: duckdb.DuckDBPyConnection) -> Schema:
    """Return the static file schema for a bound relation."""
    if relation.arrow_schema is not None:
        return tuple(
            Column(name=field.name, type=str(field.type), nullable=bool(field.nullable))
            for field in relation.arrow_schema
        )

    try:
        return _describe(connection, f"SELECT * FROM {relation.source_sql}")
    except duckdb.Error as exc:
        raise FileReadError(f"Failed to load Parquet file: {exc}") from exc


def describe_query(statement: str, connection: duckdb.DuckDBPyConnection) -> Schema:
    """Describe the projected shape of an already-resolved statement."""
    try:
        return _describe(connection, statement)
    except duckdb.Error as exc:
        raise QuerySyntaxError(f"SQL error: {exc}") from exc


def describe_metadata(
    relation: BoundRelation,
    connection: duckdb.DuckDBPyConnection,
    *,
    column_count: int,
) -> tuple[MetadataRow, ...]:
    """Collect file-level fields then key/value pairs into one flat list."""
    handle = relation.handle
    size_label = format_file_size(handle.size_bytes)

    if handle.kind is FileKind.ARROW_IPC:
        return (
            MetadataRow("File Name", handle.name),
            MetadataRow("File Size", size_label),
            MetadataRow("Total Columns", str(column_count)),
            MetadataRow("Total Batches", str(relation.batch_count or 0)),
            MetadataRow("Total Rows", str(relation.total_rows or 0)),
            MetadataRow("Format", IPC_FORMAT_LABEL),
            MetadataRow("Schema Metadata", "Not available"),
        )

    path_literal = quote_literal(str(handle.path))
    try:
        file_fields = _fetch_first_record(
            connection, f"SELECT * FROM parquet_file_metadata({path_literal})"
        )
        kv_pairs = connection.execute(
            f"SELECT key::VARCHAR, value::VARCHAR FROM parquet_kv_metadata({path_literal})"
        ).fetchall()
    except duckdb.Error as exc:
        raise FileReadError(f"Failed to read Parquet metadata: {exc}") from exc

    rows = [MetadataRow("File Name", handle.name)]
    rows.extend(_parquet_file_rows(file_fields, size_label=size_label, column_count=column_count))
    rows.extend(MetadataRow(str(key), str(value)) for key, value in kv_pairs if key is not None and value is not None)
    return tuple(rows)


def metadata_text(rows: Iterable[MetadataRow]) -> str:
    """Flatten metadata into ``key: value`` lines for copying."""
    return "".join(f"{row.key}: {row.value}\n" for row in rows)


# ---------------------------------------------------------------------------
# Internal helpers


def _describe(connection: duckdb.DuckDBPyConnection, statement: str) -> Schema:
    records = connection.execute(f"DESCRIBE {statement}").fetchall()
    # DESCRIBE yields column_name, column_type, null ('YES'/'NO'), key, default, extra.
    return tuple(
        Column(name=str(record[0]), type=str(record[1]), nullable=str(record[2]).upper() == "YES")
        for record in records
    )


def _fetch_first_record(connection: duckdb.DuckDBPyConnection, sql: str) -> Mapping[str, Any]:
    cursor = connection.execute(sql)
    names = [description[0] for description in cursor.description or ()]
    record = cursor.fetchone()
    if record is None:
        return {}
    return dict(zip(names, record))


def _parquet_file_rows(
    fields: Mapping[str, Any],
    *,
    size_label: str,
    column_count: int,
) -> Sequence[MetadataRow]:
    # No footer record means no file-level rows at all, local facts included.
    if not fields:
        return ()
    rows: list[MetadataRow] = []
    for column, key in _PARQUET_FILE_FIELDS:
        value = fields.get(column)
        if value is not None:
            rows.append(MetadataRow(key, str(value)))
        if column == "created_by":
            rows.append(MetadataRow("File Size", size_label))
            rows.append(MetadataRow("Total Columns", str(column_count)))
    return rows
