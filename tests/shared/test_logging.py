from __future__ import annotations

from pqview_cli.shared.logging import get_logger


def test_logger_info_routes_to_stderr(capfd) -> None:
    logger = get_logger()

    logger.info("structured log to stderr")

    captured = capfd.readouterr()
    assert "structured log to stderr" in captured.err
    assert "structured log to stderr" not in captured.out


def test_debug_only_when_verbose(capfd) -> None:
    get_logger().debug("quiet message")
    get_logger(verbose=True).debug("loud message")

    captured = capfd.readouterr()
    assert "quiet message" not in captured.err
    assert "loud message" in captured.err


def test_messages_are_not_treated_as_markup(capfd) -> None:
    get_logger().error("SELECT [bold]x[/bold] FROM tbl")

    captured = capfd.readouterr()
    assert "[bold]x[/bold]" in captured.err


def test_sql_echo_only_when_verbose(capfd) -> None:
    get_logger().sql("Resolved SQL", "SELECT 1 AS quiet")
    get_logger(verbose=True).sql("Resolved SQL", "SELECT 2 AS loud")

    captured = capfd.readouterr()
    assert "quiet" not in captured.err
    assert "Resolved SQL:" in captured.err
    assert "loud" in captured.err
    assert captured.out == ""


def test_session_lines_carry_the_session_id(capfd) -> None:
    get_logger(verbose=True).session(7, "bound to data.parquet")

    captured = capfd.readouterr()
    assert "session 7: bound to data.parquet" in captured.err
