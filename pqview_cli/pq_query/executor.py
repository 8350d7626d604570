"""Query execution helpers for pq-query."""

from __future__ import annotations

import datetime as dt
import math
import re
from collections.abc import Callable, Sequence
from typing import Any

import duckdb

from pqview_cli.shared.exceptions import QuerySyntaxError

from . import probes
from .relation import BoundRelation
from .types import EMPTY_RESULT, ResultSet

DEFAULT_ROW_LIMIT = 50
DEFAULT_PLACEHOLDER = "tbl"
NULL_DISPLAY = "NULL"
PREVIEW_ALIAS = "pqview_preview"

_PROJECTING_PATTERN = re.compile(r"^(select|with)\b", re.IGNORECASE)
_TRAILING_SEMICOLONS = re.compile(r"[\s;]+$")


def default_query(placeholder: str = DEFAULT_PLACEHOLDER, limit: int = DEFAULT_ROW_LIMIT) -> str:
    """Statement run automatically after a file loads."""
    return f"SELECT * FROM {placeholder} LIMIT {limit}"


def resolve_statement(statement: str, relation: BoundRelation, placeholder: str = DEFAULT_PLACEHOLDER) -> str:
    """Swap standalone placeholder tokens (any case) for the relation expression."""
    pattern = re.compile(rf"\b{re.escape(placeholder)}\b", re.IGNORECASE)
    replacement = relation.replacement_sql
    # A callable replacement keeps backslashes in Windows paths literal.
    return pattern.sub(lambda _match: replacement, statement)


def is_projecting(statement: str) -> bool:
    """True when the trimmed statement starts with SELECT or WITH."""
    return _PROJECTING_PATTERN.match(statement.strip()) is not None


def apply_preview_cap(statement: str, limit: int) -> str:
    """Wrap a projecting statement so the engine never yields more than ``limit`` rows."""
    body = _TRAILING_SEMICOLONS.sub("", statement.strip())
    # Newlines keep a trailing line comment from swallowing the closing paren.
    return f"SELECT * FROM (\n{body}\n) AS {PREVIEW_ALIAS} LIMIT {int(limit)}"


def run_statement(
    statement: str,
    relation: BoundRelation,
    connection: duckdb.DuckDBPyConnection,
    *,
    limit: int = DEFAULT_ROW_LIMIT,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> tuple[ResultSet, str]:
    """Execute one user statement and return the new ResultSet plus the SQL that ran."""
    trimmed = statement.strip()
    if not trimmed:
        raise QuerySyntaxError("Query text must not be empty.")
    if limit <= 0:
        raise QuerySyntaxError("Preview row limit must be a positive integer.")

    resolved = resolve_statement(trimmed, relation, placeholder)

    if not is_projecting(trimmed):
        try:
            connection.execute(resolved)
        except duckdb.Error as exc:
            raise QuerySyntaxError(f"SQL error: {exc}") from exc
        return EMPTY_RESULT, resolved

    # The wrapper dedupes repeated output names, so the schema comes from the bare statement.
    schema = probes.describe_query(_TRAILING_SEMICOLONS.sub("", resolved), connection)
    capped = apply_preview_cap(resolved, limit)
    try:
        records = connection.execute(capped).fetchall()
    except duckdb.Error as exc:
        raise QuerySyntaxError(f"SQL error: {exc}") from exc

    width = len(schema)
    rows = tuple(_extract_row(record, width) for record in records)
    return ResultSet(schema=schema, rows=rows, limit_value=limit), capped


# ---------------------------------------------------------------------------
# Cell extraction
#
# Each extractor answers for one family of engine values and returns None when
# the value is not its kind. They are tried in a fixed order; the first answer
# wins and a cell nobody claims is NULL.


def _extract_string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _extract_integer(value: Any) -> str | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def _extract_double(value: Any) -> str | None:
    if not isinstance(value, float) or not math.isfinite(value):
        return None
    if value.is_integer():
        return str(int(value))
    return str(value)


def _extract_float(value: Any) -> str | None:
    # Non-finite values only; finite floats were claimed by _extract_double.
    return str(value) if isinstance(value, float) else None


def _extract_boolean(value: Any) -> str | None:
    if isinstance(value, bool):
        return "true" if value else "false"
    return None


def _extract_temporal(value: Any) -> str | None:
    if isinstance(value, (dt.date, dt.time, dt.timedelta)):
        return str(value)
    return None


def _extract_other(value: Any) -> str | None:
    # Decimal, UUID, LIST, STRUCT, MAP and BLOB values fall through to here.
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return str(value)


CELL_EXTRACTORS: Sequence[Callable[[Any], str | None]] = (
    _extract_string,
    _extract_integer,
    _extract_double,
    _extract_float,
    _extract_boolean,
    _extract_temporal,
    _extract_other,
)


def format_cell(value: Any) -> str:
    """Render one engine value as a display string."""
    for extractor in CELL_EXTRACTORS:
        rendered = extractor(value)
        if rendered is not None:
            return rendered
    return NULL_DISPLAY


def _extract_row(record: Sequence[Any], width: int) -> tuple[str, ...]:
    cells = tuple(format_cell(value) for value in record)
    if len(cells) != width:
        raise QuerySyntaxError(
            f"Result shape mismatch: described {width} columns but received {len(cells)}."
        )
    return cells
