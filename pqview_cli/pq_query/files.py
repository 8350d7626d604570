"""File selection and kind detection for pq-query."""

from __future__ import annotations

from pathlib import Path

from pqview_cli.shared.exceptions import FileReadError, UnsupportedExtensionError

from .types import FileHandle, FileKind

EXTENSION_KINDS: dict[str, FileKind] = {
    ".parquet": FileKind.PARQUET,
    ".arrow": FileKind.ARROW_IPC,
    ".feather": FileKind.ARROW_IPC,
    ".ipc": FileKind.ARROW_IPC,
}


def detect_kind(path: str | Path) -> FileKind:
    """Map a path's extension to a FileKind without touching the filesystem."""
    suffix = Path(path).suffix.lower()
    try:
        return EXTENSION_KINDS[suffix]
    except KeyError:
        supported = ", ".join(EXTENSION_KINDS)
        raise UnsupportedExtensionError(
            f"Unsupported file type '{suffix or Path(path).name}'. Please use {supported} files."
        ) from None


def load_file(path: str | Path) -> FileHandle:
    """Validate ``path`` and return a FileHandle; contents are not parsed here."""
    resolved = Path(path).expanduser()
    kind = detect_kind(resolved)
    try:
        size_bytes = resolved.stat().st_size
    except OSError as exc:
        raise FileReadError(f"Unable to open {resolved}: {exc.strerror or exc}") from exc
    if not resolved.is_file():
        raise FileReadError(f"{resolved} is not a regular file.")
    return FileHandle(path=resolved.resolve(), kind=kind, size_bytes=size_bytes)
