"""pq-export CLI entrypoint."""

from __future__ import annotations

from pathlib import Path

import click

from pqview_cli.pq_export import (
    EXPORT_FORMATS,
    infer_format,
    render_export,
    resolve_destination,
    write_export,
)
from pqview_cli.pq_query.session import execute_statement, open_session
from pqview_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors
from pqview_cli.shared.config import AppConfig
from pqview_cli.shared.exceptions import ConfigurationError, ExportIOError, FileReadError, UnsupportedExtensionError


@click.command(help="Export a query result or the file schema as CSV or JSON.")
@click.argument("file", type=click.Path(path_type=str))
@click.option("--query", type=str, help="SQL to export (defaults to the preview query); address the file as `tbl`.")
@click.option(
    "--format",
    "export_format",
    type=click.Choice(EXPORT_FORMATS),
    help="Output format (defaults to the output extension, then the configured format).",
)
@click.option("--schema-only", is_flag=True, help="Export the file schema instead of query rows.")
@click.option("--limit", type=int, help="Override the preview row cap.")
@click.option(
    "--output",
    type=click.Path(path_type=str),
    help="Output file or existing directory (default stdout).",
)
@common_cli_options
@handle_cli_errors
def cli(
    file: str,
    query: str | None,
    export_format: str | None,
    schema_only: bool,
    limit: int | None,
    output: str | None,
    cli_ctx: CLIContext,
) -> None:
    """Serialise the latest result (or schema) of FILE."""
    config = _config_with_limit(cli_ctx.config, limit)
    output_path = Path(output).expanduser() if output else None
    format_choice = infer_format(output_path, export_format, default=config.export.format)

    if query is not None and not query.strip():
        raise click.ClickException("Query text must not be empty.")

    try:
        live = open_session(file, config)
    except (UnsupportedExtensionError, FileReadError) as exc:
        raise click.ClickException(str(exc)) from exc

    try:
        session = live.session
        if query is not None and not schema_only:
            session = execute_statement(live, query, config)
    finally:
        live.close()

    if session.error and not schema_only:
        raise click.ClickException(session.error)

    rendered = render_export(
        result=session.result,
        schema=session.file_schema,
        export_format=format_choice,
        schema_only=schema_only,
        json_indent=config.export.json_indent,
    )

    if output_path is None:
        click.echo(rendered, nl=False)
        cli_ctx.logger.debug(f"Exported {session.handle.name} ({format_choice}) to stdout")
        return

    destination = resolve_destination(
        output_path,
        session.handle.name,
        format_choice,
        schema_only=schema_only,
    )
    try:
        written = write_export(rendered, destination)
    except ExportIOError as exc:
        raise click.ClickException(str(exc)) from exc

    what = "schema" if schema_only else f"{session.result.row_count} rows"
    cli_ctx.logger.info(f"Exported {what} ({format_choice}) → {written}")


def _config_with_limit(config: AppConfig, limit: int | None) -> AppConfig:
    if limit is None:
        return config
    try:
        return config.with_row_limit(limit)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
