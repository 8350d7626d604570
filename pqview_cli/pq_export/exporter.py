"""Serialisation helpers for ``pq-export``.

Everything here is a pure function of a ResultSet or Schema except
:func:`write_export`, which is the single place that touches the filesystem.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Sequence
from pathlib import Path

from pqview_cli.pq_query.types import ResultSet, Schema
from pqview_cli.shared.exceptions import ExportIOError

EXPORT_FORMATS = ("csv", "json")
SCHEMA_CSV_HEADER = ("Column Name", "Data Type", "Nullable")
SCHEMA_SUFFIX = "_schema"
_FORMAT_EXTENSIONS = {"csv": ".csv", "json": ".json"}


def result_to_delimited_text(result: ResultSet, *, delimiter: str = ",") -> str:
    """Header of column names followed by each row, every field quoted."""
    return _delimited(result.columns, result.rows, delimiter=delimiter)


def result_to_structured_text(result: ResultSet, *, indent: int = 2) -> str:
    """JSON array with one ``{column: cell}`` object per row."""
    columns = result.columns
    records = [dict(zip(columns, row)) for row in result.rows]
    return _json_dump(records, indent=indent)


def schema_to_delimited_text(schema: Schema, *, delimiter: str = ",") -> str:
    rows = [(column.name, column.type, nullable_label(column.nullable)) for column in schema]
    return _delimited(SCHEMA_CSV_HEADER, rows, delimiter=delimiter)


def schema_to_structured_text(schema: Schema, *, indent: int = 2) -> str:
    records = [
        {
            "column_name": column.name,
            "data_type": column.type,
            "nullable": nullable_label(column.nullable),
        }
        for column in schema
    ]
    return _json_dump(records, indent=indent)


def render_export(
    *,
    result: ResultSet,
    schema: Schema,
    export_format: str,
    schema_only: bool,
    json_indent: int = 2,
) -> str:
    """Pick the serialiser for a format/target combination."""
    if export_format not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format '{export_format}'.")
    if schema_only:
        if export_format == "json":
            return schema_to_structured_text(schema, indent=json_indent)
        return schema_to_delimited_text(schema)
    if export_format == "json":
        return result_to_structured_text(result, indent=json_indent)
    return result_to_delimited_text(result)


def infer_format(output_path: Path | None, explicit_format: str | None, default: str = "csv") -> str:
    """Infer the export format from CLI input and the output extension."""
    if explicit_format:
        return explicit_format
    if output_path is None:
        return default
    suffix = output_path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix == ".csv":
        return "csv"
    return default


def derive_export_filename(source_name: str, export_format: str, *, schema_only: bool = False) -> str:
    """``data.parquet`` -> ``data.csv`` or ``data_schema.json``."""
    stem = Path(source_name).stem or "export"
    suffix = SCHEMA_SUFFIX if schema_only else ""
    return f"{stem}{suffix}{_FORMAT_EXTENSIONS[export_format]}"


def resolve_destination(
    output: Path,
    source_name: str,
    export_format: str,
    *,
    schema_only: bool = False,
) -> Path:
    """Treat an existing directory as the target folder for a derived file name."""
    if output.is_dir():
        return output / derive_export_filename(source_name, export_format, schema_only=schema_only)
    return output


def write_export(content: str, path: Path) -> Path:
    """Write ``content`` to ``path``, creating parent directories as needed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ExportIOError(f"Failed to export to {path}: {exc.strerror or exc}") from exc
    return path


def nullable_label(nullable: bool) -> str:
    return "Yes" if nullable else "No"


# ---------------------------------------------------------------------------
# Internal helpers


def _delimited(header: Sequence[str], rows: Iterable[Sequence[str]], *, delimiter: str) -> str:
    buffer = io.StringIO()
    # QUOTE_ALL doubles embedded quotes and keeps embedded newlines inside the field.
    writer = csv.writer(buffer, delimiter=delimiter, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def _json_dump(records: list[dict[str, str]], *, indent: int) -> str:
    return json.dumps(records, indent=indent, sort_keys=True, ensure_ascii=False) + "\n"
