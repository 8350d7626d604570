"""Public exports for the pq-export package."""

from .exporter import (
    EXPORT_FORMATS,
    derive_export_filename,
    infer_format,
    render_export,
    resolve_destination,
    result_to_delimited_text,
    result_to_structured_text,
    schema_to_delimited_text,
    schema_to_structured_text,
    write_export,
)

__all__ = [
    "EXPORT_FORMATS",
    "derive_export_filename",
    "infer_format",
    "render_export",
    "resolve_destination",
    "result_to_delimited_text",
    "result_to_structured_text",
    "schema_to_delimited_text",
    "schema_to_structured_text",
    "write_export",
]
