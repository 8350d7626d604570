"""Configuration loading utilities for the pqview CLI suite."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from . import paths
from .exceptions import ConfigurationError

EXPORT_FORMATS = ("csv", "json")


@dataclass(frozen=True, slots=True)
class PreviewSettings:
    """Bounded preview configuration."""

    row_limit: int


@dataclass(frozen=True, slots=True)
class QuerySettings:
    """SQL console configuration."""

    placeholder: str


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Embedded engine tuning; zero/empty values keep the engine defaults."""

    threads: int
    memory_limit: str


@dataclass(frozen=True, slots=True)
class ExportSettings:
    """Export defaults."""

    format: str
    json_indent: int


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Top-level application configuration."""

    source_path: Path
    preview: PreviewSettings
    query: QuerySettings
    engine: EngineSettings
    export: ExportSettings

    def with_row_limit(self, row_limit: int) -> AppConfig:
        """Return a copy with an updated preview cap."""
        if row_limit <= 0:
            raise ConfigurationError("Preview row limit must be a positive integer.")
        return replace(self, preview=replace(self.preview, row_limit=row_limit))


def _default_config() -> dict[str, Any]:
    return {
        "preview": {"row_limit": 50},
        "query": {"placeholder": "tbl"},
        "engine": {"threads": 0, "memory_limit": ""},
        "export": {"format": "csv", "json_indent": 2},
    }


ENV_OVERRIDE_SPEC: dict[str, tuple[str, type]] = {
    "preview.row_limit": ("PQVIEW_PREVIEW_ROW_LIMIT", int),
    "query.placeholder": ("PQVIEW_PLACEHOLDER", str),
    "engine.threads": ("PQVIEW_ENGINE_THREADS", int),
    "engine.memory_limit": ("PQVIEW_ENGINE_MEMORY_LIMIT", str),
    "export.format": ("PQVIEW_EXPORT_FORMAT", str),
    "export.json_indent": ("PQVIEW_EXPORT_JSON_INDENT", int),
}


def load_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load configuration from defaults, YAML file, and env overrides."""
    env = dict(os.environ if env is None else env)
    resolved_config_path = _resolve_config_path(config_path, env)
    file_data = _load_yaml(resolved_config_path)
    merged: dict[str, Any] = _deep_merge(_default_config(), file_data)
    merged = _apply_env_overrides(merged, env)
    return _build_config(merged, resolved_config_path)


def _resolve_config_path(
    config_path: str | Path | None, env: Mapping[str, str]
) -> Path:
    if config_path:
        return paths.resolve_path(config_path)
    return paths.default_config_path(env=env)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Config file at {path} is not valid YAML: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigurationError(f"Config file at {path} must define a mapping root object.")
        return dict(data)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    config_copy = _deep_merge(config, {})
    for dotted_key, (env_key, expected_type) in ENV_OVERRIDE_SPEC.items():
        if env_key not in env:
            continue
        raw_value = env[env_key]
        try:
            value = _coerce_env_value(raw_value, expected_type)
        except ValueError as exc:
            raise ConfigurationError(
                f"Environment override {env_key} has invalid value '{raw_value}': {exc}"
            ) from exc
        _assign_nested(config_copy, dotted_key.split("."), value)
    return config_copy


def _coerce_env_value(raw: str, expected_type: type) -> Any:
    cleaned = raw.strip()
    if expected_type is int:
        return int(cleaned)
    return cleaned


def _assign_nested(target: MutableMapping[str, Any], keys: list[str], value: Any) -> None:
    current = target
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], MutableMapping):
            current[key] = {}
        current = current[key]  # type: ignore[assignment]
    current[keys[-1]] = value


def _build_config(data: Mapping[str, Any], source_path: Path) -> AppConfig:
    try:
        preview = PreviewSettings(row_limit=int(data["preview"]["row_limit"]))
        query = QuerySettings(placeholder=str(data["query"]["placeholder"]).strip())
        engine = EngineSettings(
            threads=int(data["engine"]["threads"]),
            memory_limit=str(data["engine"]["memory_limit"] or "").strip(),
        )
        export = ExportSettings(
            format=str(data["export"]["format"]).lower(),
            json_indent=int(data["export"]["json_indent"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration structure: {exc}") from exc

    if preview.row_limit <= 0:
        raise ConfigurationError("preview.row_limit must be a positive integer.")
    if not query.placeholder.isidentifier():
        raise ConfigurationError(
            f"query.placeholder must be a plain SQL identifier, got '{query.placeholder}'."
        )
    if engine.threads < 0:
        raise ConfigurationError("engine.threads must be zero (engine default) or positive.")
    if export.format not in EXPORT_FORMATS:
        raise ConfigurationError(
            f"export.format must be one of {', '.join(EXPORT_FORMATS)}, got '{export.format}'."
        )

    return AppConfig(
        source_path=source_path,
        preview=preview,
        query=query,
        engine=engine,
        export=export,
    )
