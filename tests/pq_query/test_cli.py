from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from pqview_cli.pq_query.main import cli


def _invoke(*args: str, input: str | None = None):
    runner = CliRunner()
    return runner.invoke(cli, list(args), input=input)


def test_sql_default_query_json(parquet_file: Path) -> None:
    result = _invoke("sql", str(parquet_file), "--format", "json")

    assert result.exit_code == 0, result.output
    start = result.output.index("[")
    records = json.loads(result.output[start : result.output.rindex("]") + 1])
    assert len(records) == 50
    assert records[0] == {"active": "true", "day": "2024-01-01", "id": "0", "name": "NULL", "score": "0"}


def test_sql_custom_query_with_limit(parquet_file: Path) -> None:
    result = _invoke("sql", str(parquet_file), "SELECT id FROM tbl ORDER BY id", "--limit", "3", "--format", "csv")

    assert result.exit_code == 0, result.output
    assert '"id"\n"0"\n"1"\n"2"\n' in result.output


def test_sql_reports_engine_error(parquet_file: Path) -> None:
    result = _invoke("sql", str(parquet_file), "SELECT missing_col FROM tbl")

    assert result.exit_code != 0
    assert "SQL error" in result.output


def test_sql_rejects_unsupported_extension(tmp_path: Path) -> None:
    source = tmp_path / "data.csv"
    source.write_text("a\n1\n", encoding="utf-8")

    result = _invoke("sql", str(source))

    assert result.exit_code != 0
    assert "Unsupported" in result.output or ".csv" in result.output


def test_sql_rejects_non_positive_limit(parquet_file: Path) -> None:
    result = _invoke("sql", str(parquet_file), "--limit", "0")

    assert result.exit_code != 0


def test_schema_csv(feather_file: Path) -> None:
    result = _invoke("schema", str(feather_file), "--format", "csv")

    assert result.exit_code == 0, result.output
    assert '"Column Name","Data Type","Nullable"' in result.output
    assert '"id","int64","Yes"' in result.output


def test_metadata_text(small_parquet_file: Path) -> None:
    result = _invoke("metadata", str(small_parquet_file), "--format", "text")

    assert result.exit_code == 0, result.output
    assert "File Name: small.parquet" in result.output
    assert "Total Rows: 3" in result.output
    assert "origin: pqview-tests" in result.output


def test_shell_runs_statements_and_keeps_last_result(small_parquet_file: Path) -> None:
    script = "\n".join(
        [
            "SELECT count(*) AS total FROM tbl",
            "SELECT broken FROM tbl",
            ".metadata",
            ".quit",
        ]
    )

    result = _invoke("shell", str(small_parquet_file), input=script + "\n")

    assert result.exit_code == 0, result.output
    assert "total" in result.output
    assert "broken" in result.output
    assert "File Name" in result.output


def test_config_file_sets_row_limit(tmp_path: Path, parquet_file: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("preview:\n  row_limit: 4\n", encoding="utf-8")

    result = _invoke("--config", str(config_file), "sql", str(parquet_file), "--format", "csv")

    assert result.exit_code == 0, result.output
    assert '"4",' not in result.output
    assert '"3",' in result.output


def test_sql_verbose_echoes_resolved_sql(small_parquet_file: Path) -> None:
    result = _invoke("--verbose", "sql", str(small_parquet_file), "SELECT id FROM tbl", "--format", "csv")

    assert result.exit_code == 0, result.output
    assert "Resolved SQL:" in result.output
    assert "read_parquet" in result.output
