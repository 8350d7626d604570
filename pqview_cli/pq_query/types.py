"""Data structures shared across pq-query modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class FileKind(str, Enum):
    """Supported on-disk columnar formats."""

    PARQUET = "parquet"
    ARROW_IPC = "arrow_ipc"


@dataclass(frozen=True, slots=True)
class FileHandle:
    """A loaded columnar source, addressed by path from here on."""

    path: Path
    kind: FileKind
    size_bytes: int

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class Column:
    """One schema column; ``type`` is the engine-native type name, verbatim."""

    name: str
    type: str
    nullable: bool


Schema = tuple[Column, ...]


@dataclass(frozen=True, slots=True)
class ResultSet:
    """Immutable outcome of one query execution."""

    schema: Schema = ()
    rows: tuple[tuple[str, ...], ...] = ()
    limit_value: int | None = None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.schema)

    @property
    def is_empty(self) -> bool:
        return not self.schema and not self.rows


EMPTY_RESULT = ResultSet()


@dataclass(frozen=True, slots=True)
class MetadataRow:
    """Flat key/value pair describing the loaded file."""

    key: str
    value: str


@dataclass(frozen=True, slots=True)
class Session:
    """Everything known about one loaded file; replaced wholesale, never mutated."""

    session_id: int
    handle: FileHandle
    file_schema: Schema
    metadata: tuple[MetadataRow, ...]
    result: ResultSet = EMPTY_RESULT
    error: str | None = None
    last_statement: str | None = None
    resolved_sql: str | None = field(default=None, compare=False)
