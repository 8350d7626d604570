"""pq-query CLI entrypoint."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from pqview_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors, pass_cli_context
from pqview_cli.shared.config import AppConfig
from pqview_cli.shared.exceptions import (
    ConfigurationError,
    FileReadError,
    QueryError,
    UnsupportedExtensionError,
)

from . import render
from .session import OpenSession, SessionController, execute_statement, open_session
from .types import Session

OUTPUT_FORMAT_CHOICES = ("table", "tsv", "csv", "json")
SCHEMA_FORMAT_CHOICES = ("table", "csv", "json")
METADATA_FORMAT_CHOICES = ("table", "text")

SHELL_QUIT_COMMANDS = {".quit", ".exit"}


@click.group(help="Inspect and query Parquet and Arrow IPC files.")
@common_cli_options
@handle_cli_errors
def cli(cli_ctx: CLIContext) -> None:
    """Primary Click group for pq-query commands."""
    cli_ctx.logger.debug("pq-query group initialised.")


@cli.command("schema")
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(SCHEMA_FORMAT_CHOICES),
)
@pass_cli_context
def show_schema(cli_ctx: CLIContext, file: Path, output_format: str) -> None:
    """Display the file's column names, types and nullability."""
    _log_subcommand_entry(cli_ctx, "schema", file)
    with _open(cli_ctx, file, cli_ctx.config) as live:
        render.render_schema(
            live.session.file_schema,
            output_format=output_format,
            logger=cli_ctx.logger,
            title=live.session.handle.name if output_format == "table" else None,
        )


@cli.command("sql")
@click.argument("file", type=click.Path(path_type=Path))
@click.argument("query", type=str, required=False)
@click.option("--limit", type=int, help="Override the preview row cap.")
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(OUTPUT_FORMAT_CHOICES),
)
@pass_cli_context
def run_sql(
    cli_ctx: CLIContext,
    file: Path,
    query: str | None,
    limit: int | None,
    output_format: str,
) -> None:
    """Run SQL against FILE, addressed as `tbl` (defaults to a preview query)."""
    _log_subcommand_entry(cli_ctx, "sql", file)
    if query is not None and not query.strip():
        raise click.ClickException("Query text must not be empty.")

    config = _config_with_limit(cli_ctx, limit)
    with _open(cli_ctx, file, config) as live:
        session = live.session
        if query is not None:
            session = execute_statement(live, query, config)
        _raise_for_session_error(session)
        cli_ctx.logger.sql("Resolved SQL", session.resolved_sql)
        render.render_result_set(session.result, output_format=output_format, logger=cli_ctx.logger)


@cli.command("metadata")
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(METADATA_FORMAT_CHOICES),
)
@pass_cli_context
def show_metadata(cli_ctx: CLIContext, file: Path, output_format: str) -> None:
    """Display file-level and key/value metadata."""
    _log_subcommand_entry(cli_ctx, "metadata", file)
    with _open(cli_ctx, file, cli_ctx.config) as live:
        render.render_metadata(live.session.metadata, output_format=output_format)


@cli.command("shell")
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--limit", type=int, help="Override the preview row cap.")
@pass_cli_context
def shell(cli_ctx: CLIContext, file: Path, limit: int | None) -> None:
    """Interactive SQL console over FILE.

    Enter SQL statements that reference the file as `tbl`. Meta-commands:
    `.schema`, `.metadata`, `.quit`. A failed statement keeps the last good
    result.
    """
    _log_subcommand_entry(cli_ctx, "shell", file)
    config = _config_with_limit(cli_ctx, limit)
    logger = cli_ctx.logger

    with SessionController(config, logger=logger) as controller:
        try:
            session = controller.load(file).result()
        except (UnsupportedExtensionError, FileReadError) as exc:
            raise click.ClickException(str(exc)) from exc
        if session is None:  # pragma: no cover - only one load is ever issued here
            raise click.ClickException(f"Loading {file} was superseded.")

        logger.info(
            f"Loaded {session.handle.name} ({len(session.file_schema)} columns). "
            f"Query it as `{config.query.placeholder}`; `.quit` to leave."
        )
        render.render_result_set(session.result, output_format="table", logger=logger)

        while True:
            try:
                line = click.prompt("pq", prompt_suffix="> ", default="", show_default=False)
            except click.Abort:
                break
            command = line.strip()
            if not command:
                continue
            if command in SHELL_QUIT_COMMANDS:
                break
            current = controller.current
            if current is None:  # pragma: no cover - controller always holds the loaded session
                break
            if command == ".schema":
                render.render_schema(current.file_schema, output_format="table", logger=logger)
                continue
            if command == ".metadata":
                render.render_metadata(current.metadata, output_format="table")
                continue

            try:
                updated = controller.run(command).result()
            except QueryError as exc:
                logger.error(str(exc))
                continue
            if updated is None:
                continue
            if updated.error:
                logger.error(updated.error)
                continue
            render.render_result_set(updated.result, output_format="table", logger=logger)


def _log_subcommand_entry(cli_ctx: CLIContext, command: str, file: Path) -> None:
    cli_ctx.logger.debug(f"pq-query {command} invoked for {file}")


def _config_with_limit(cli_ctx: CLIContext, limit: int | None) -> AppConfig:
    if limit is None:
        return cli_ctx.config
    try:
        return cli_ctx.config.with_row_limit(limit)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc


@contextmanager
def _open(cli_ctx: CLIContext, file: Path, config: AppConfig) -> Iterator[OpenSession]:
    """Open a session for one command, turning load failures into Click errors."""
    try:
        live = open_session(file, config)
    except (UnsupportedExtensionError, FileReadError) as exc:
        raise click.ClickException(str(exc)) from exc
    cli_ctx.logger.debug(f"Opened {live.session.handle.kind.value} file {live.session.handle.path}")
    try:
        yield live
    finally:
        live.close()


def _raise_for_session_error(session: Session) -> None:
    if session.error:
        raise click.ClickException(session.error)


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
