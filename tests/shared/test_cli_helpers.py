from __future__ import annotations

from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from pqview_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors
from pqview_cli.shared.exceptions import ConfigurationError, QueryError


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_common_cli_options_builds_context(runner: CliRunner, tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("preview:\n  row_limit: 9\n", encoding="utf-8")

    @click.command()
    @common_cli_options
    def sample(cli_ctx: CLIContext) -> None:
        click.echo(f"limit={cli_ctx.config.preview.row_limit} verbose={cli_ctx.verbose}")

    result = runner.invoke(sample, ["--config", str(cfg_file), "--verbose"])

    assert result.exit_code == 0, result.output
    assert "limit=9 verbose=True" in result.output


def test_common_cli_options_reports_bad_config(runner: CliRunner, tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("preview:\n  row_limit: -3\n", encoding="utf-8")

    @click.command()
    @common_cli_options
    def sample(cli_ctx: CLIContext) -> None:  # pragma: no cover - never reached
        click.echo("ran")

    result = runner.invoke(sample, ["--config", str(cfg_file)])

    assert result.exit_code != 0
    assert "Configuration error" in result.output


@pytest.mark.parametrize(
    "exc, expected",
    [
        (ConfigurationError("bad"), "Configuration error: bad"),
        (QueryError("nothing loaded"), "nothing loaded"),
    ],
)
def test_handle_cli_errors_converts_project_errors(runner: CliRunner, exc: Exception, expected: str) -> None:
    @click.command()
    @handle_cli_errors
    def failing() -> None:
        raise exc

    result = runner.invoke(failing, [])

    assert result.exit_code == 1
    assert expected in result.output
