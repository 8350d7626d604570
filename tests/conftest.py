"""Shared pytest fixtures for pqview tests.

The fixtures write small but real Parquet and Arrow IPC files with pyarrow so
the engine, the reader and the CLI are exercised end to end. Every file holds
the same table: ``id`` 0..N-1, ``name`` (every tenth value null), ``score``
(``id * 0.5``), ``active`` (even ids) and ``day`` (2024-01-01 + id days).
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from pathlib import Path

import duckdb
import pyarrow as pa
import pyarrow.feather as feather
import pyarrow.ipc
import pyarrow.parquet as pq
import pytest

from pqview_cli.pq_query.relation import BoundRelation, bind_relation
from pqview_cli.pq_query.files import load_file
from pqview_cli.shared import paths
from pqview_cli.shared.config import AppConfig, load_config
from pqview_cli.shared.engine import open_connection

LARGE_ROW_COUNT = 120
SMALL_ROW_COUNT = 3
KV_METADATA = {b"origin": b"pqview-tests"}


def build_table(row_count: int) -> pa.Table:
    ids = list(range(row_count))
    table = pa.table(
        {
            "id": pa.array(ids, type=pa.int64()),
            "name": pa.array([None if i % 10 == 0 else f"name-{i}" for i in ids], type=pa.string()),
            "score": pa.array([i * 0.5 for i in ids], type=pa.float64()),
            "active": pa.array([i % 2 == 0 for i in ids], type=pa.bool_()),
            "day": pa.array([dt.date(2024, 1, 1) + dt.timedelta(days=i) for i in ids], type=pa.date32()),
        }
    )
    return table.replace_schema_metadata(KV_METADATA)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's ~/.pqview and PQVIEW_* variables out of tests."""
    monkeypatch.setenv(paths.CONFIG_DIR_ENV, str(tmp_path / "pqview-config"))
    monkeypatch.delenv(paths.CONFIG_FILE_ENV, raising=False)
    for env_key in (
        "PQVIEW_PREVIEW_ROW_LIMIT",
        "PQVIEW_PLACEHOLDER",
        "PQVIEW_ENGINE_THREADS",
        "PQVIEW_ENGINE_MEMORY_LIMIT",
        "PQVIEW_EXPORT_FORMAT",
        "PQVIEW_EXPORT_JSON_INDENT",
    ):
        monkeypatch.delenv(env_key, raising=False)


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    """Default configuration with no config file on disk."""
    return load_config(config_path=tmp_path / "absent.yaml", env={})


@pytest.fixture()
def write_parquet(tmp_path: Path) -> Callable[..., Path]:
    def _write(name: str = "data.parquet", row_count: int = LARGE_ROW_COUNT) -> Path:
        path = tmp_path / name
        pq.write_table(build_table(row_count), path)
        return path

    return _write


@pytest.fixture()
def parquet_file(write_parquet: Callable[..., Path]) -> Path:
    return write_parquet("data.parquet", LARGE_ROW_COUNT)


@pytest.fixture()
def small_parquet_file(write_parquet: Callable[..., Path]) -> Path:
    return write_parquet("small.parquet", SMALL_ROW_COUNT)


@pytest.fixture()
def feather_file(tmp_path: Path) -> Path:
    path = tmp_path / "data.feather"
    feather.write_feather(build_table(LARGE_ROW_COUNT), path, compression="uncompressed")
    return path


@pytest.fixture()
def ipc_stream_file(tmp_path: Path) -> Path:
    """Streaming-layout IPC file written in three record batches."""
    path = tmp_path / "stream.ipc"
    table = build_table(30)
    with pa.OSFile(str(path), "wb") as sink:
        with pa.ipc.new_stream(sink, table.schema) as writer:
            for batch in table.to_batches(max_chunksize=10):
                writer.write_batch(batch)
    return path


@pytest.fixture()
def connection(app_config: AppConfig):
    con = open_connection(app_config.engine)
    yield con
    con.close()


@pytest.fixture()
def bind(connection: duckdb.DuckDBPyConnection) -> Callable[[Path], BoundRelation]:
    def _bind(path: Path) -> BoundRelation:
        return bind_relation(load_file(path), connection)

    return _bind
