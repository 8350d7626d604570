"""Project-wide custom exceptions."""

from __future__ import annotations


class PqViewError(Exception):
    """Base exception for the pqview CLI suite."""


class ConfigurationError(PqViewError):
    """Raised when configuration loading or validation fails."""


class UnsupportedExtensionError(PqViewError):
    """Raised when a file's extension is not a supported columnar format."""


class FileReadError(PqViewError):
    """Raised when the engine or reader cannot open a columnar file."""


class QueryError(PqViewError):
    """Raised when query orchestration or execution fails."""


class QuerySyntaxError(QueryError):
    """Raised when the engine rejects a statement; carries the engine message."""


class QueryInFlightError(QueryError):
    """Raised when a session already has an outstanding query."""


class ExportIOError(PqViewError):
    """Raised when an export destination cannot be written."""
