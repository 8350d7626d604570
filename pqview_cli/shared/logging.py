"""Rich-backed console logging for the pqview commands.

Result payloads (tables, CSV, JSON) are written to stdout by the renderers;
everything here goes to stderr so piped exports stay clean.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.syntax import Syntax
from rich.theme import Theme
from rich.traceback import install

install(show_locals=False)

_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "debug": "dim",
        "session": "dim magenta",
    }
)

# Highlighting off: SQL text and file paths are printed verbatim.
_log_console = Console(stderr=True, theme=_THEME, highlight=False)


@dataclass(slots=True)
class Logger:
    """Level-styled messages on stderr; debug output only with ``--verbose``."""

    verbose: bool = False

    def info(self, message: str) -> None:
        self._emit(message, "info")

    def success(self, message: str) -> None:
        self._emit(message, "success")

    def warning(self, message: str) -> None:
        self._emit(message, "warning")

    def error(self, message: str) -> None:
        self._emit(message, "error")

    def debug(self, message: str) -> None:
        if self.verbose:
            self._emit(message, "debug")

    def sql(self, label: str, statement: str | None) -> None:
        """Echo the SQL actually sent to the engine, syntax-highlighted."""
        if not self.verbose or not statement:
            return
        self._emit(f"{label}:", "debug")
        _log_console.print(
            Syntax(statement.strip(), "sql", theme="ansi_dark", background_color="default", word_wrap=True)
        )

    def session(self, session_id: int, message: str) -> None:
        """Debug line tagged with the session it concerns."""
        if self.verbose:
            self._emit(f"session {session_id}: {message}", "session")

    def _emit(self, message: str, style: str) -> None:
        _log_console.print(message, style=style, markup=False)


def get_logger(verbose: bool = False) -> Logger:
    """Return a configured Logger instance."""
    return Logger(verbose=verbose)
