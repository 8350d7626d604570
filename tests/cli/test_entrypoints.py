"""Smoke tests verifying CLI entry points load and print help."""

from __future__ import annotations

import importlib
from typing import Callable

import pytest
from click.testing import CliRunner


@pytest.mark.parametrize(
    "module_path, attr_name, prog_name",
    [
        ("pqview_cli.pq_query.main", "cli", "pq-query"),
        ("pqview_cli.pq_export.main", "cli", "pq-export"),
    ],
)
def test_cli_entrypoint_help(module_path: str, attr_name: str, prog_name: str) -> None:
    module = importlib.import_module(module_path)
    cli: Callable[..., object] = getattr(module, attr_name)

    runner = CliRunner()
    result = runner.invoke(cli, ["--help"], prog_name=prog_name)

    assert result.exit_code == 0, result.output
    assert "Usage" in result.output


@pytest.mark.parametrize("command", ["schema", "sql", "metadata", "shell"])
def test_pq_query_subcommand_help(command: str) -> None:
    from pqview_cli.pq_query.main import cli

    result = CliRunner().invoke(cli, [command, "--help"], prog_name="pq-query")

    assert result.exit_code == 0, result.output
    assert "FILE" in result.output
