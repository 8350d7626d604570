"""Output rendering helpers for pq-query."""

from __future__ import annotations

import sys
from typing import IO, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pqview_cli.pq_export import exporter
from pqview_cli.shared.logging import Logger

from .probes import metadata_text
from .types import MetadataRow, ResultSet, Schema


def render_result_set(
    result: ResultSet,
    *,
    output_format: str,
    logger: Logger,
    stream=None,
) -> None:
    """Render a result set to the desired format."""
    output_stream = stream or sys.stdout
    fmt = (output_format or "table").lower()

    if fmt == "table":
        _render_result_table(result, logger=logger, stream=output_stream)
    elif fmt == "csv":
        output_stream.write(exporter.result_to_delimited_text(result))
    elif fmt == "tsv":
        output_stream.write(exporter.result_to_delimited_text(result, delimiter="\t"))
    elif fmt == "json":
        output_stream.write(exporter.result_to_structured_text(result))
    else:  # pragma: no cover - Click validation should prevent this
        raise ValueError(f"Unsupported output format '{output_format}'.")

    if result.limit_value is not None and result.row_count >= result.limit_value:
        logger.warning(
            f"Showing the first {result.limit_value} rows. Re-run with --limit to widen the preview."
        )


def render_schema(
    schema: Schema,
    *,
    output_format: str,
    logger: Logger,
    title: str | None = None,
    stream=None,
) -> None:
    """Render a file or result schema."""
    output_stream = stream or sys.stdout
    fmt = (output_format or "table").lower()

    if fmt == "json":
        output_stream.write(exporter.schema_to_structured_text(schema))
        return
    if fmt == "csv":
        output_stream.write(exporter.schema_to_delimited_text(schema))
        return

    console = Console(file=output_stream, highlight=False, force_terminal=False)
    if title:
        console.print(title, style="bold", markup=False)
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Column")
    table.add_column("Type")
    table.add_column("Nullable")
    for column in schema:
        table.add_row(Text(column.name), Text(column.type), exporter.nullable_label(column.nullable))
    console.print(table)
    console.print(f"{len(schema)} columns")

    if not schema:
        logger.info("The file has no columns.")


def render_metadata(
    rows: Sequence[MetadataRow],
    *,
    output_format: str,
    stream=None,
) -> None:
    """Render file metadata as a key/value table or ``key: value`` text."""
    output_stream = stream or sys.stdout
    if (output_format or "table").lower() == "text":
        output_stream.write(metadata_text(rows))
        return

    console = Console(file=output_stream, highlight=False, force_terminal=False)
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Key", style="bold")
    table.add_column("Value", overflow="fold")
    for row in rows:
        table.add_row(Text(row.key), Text(row.value))
    console.print(table)


def _render_result_table(result: ResultSet, *, logger: Logger, stream: IO[str]) -> None:
    if result.is_empty:
        logger.info("Statement executed; it returned no result set.")
        return

    console = Console(file=stream, highlight=False, force_terminal=False)
    table = Table(box=box.SIMPLE_HEAVY, show_header=bool(result.schema), header_style="bold")
    for column in result.schema:
        table.add_column(Text(f"{column.name}\n{column.type}"))

    if result.rows:
        for row in result.rows:
            table.add_row(*(Text(cell) for cell in row))
    else:
        logger.info("Query returned zero rows.")

    console.print(table)
    console.print(f"{result.row_count} rows × {len(result.schema)} columns")
