# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the typesync configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from typesync.model.config import DEFAULT_TYPE_MAPPINGS, ConfigLayer, ConfigOverrides, NameTransformer
from typesync.transformers import named_transformer

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = "typesync.yaml"


class WorkspaceConfigError(Exception):
    """Raised when a configuration file is invalid or cannot be loaded."""


@dataclass
class WorkspaceConfig:
    """The parsed configuration of a typesync workspace.

    Attributes:
        layer: The global configuration snapshot. ``output_dir`` is resolved
            against the directory holding the configuration file.
        schema_files: Schema file paths, resolved the same way.
    """

    layer: ConfigLayer
    schema_files: list[Path] = field(default_factory=list)


def load_workspace_config(path: Path) -> WorkspaceConfig:
    """Load and parse a typesync configuration file.

    Args:
        path: Path to the ``typesync.yaml`` file.

    Returns:
        A WorkspaceConfig instance populated from the file.

    Raises:
        WorkspaceConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise WorkspaceConfigError(f"Configuration file not found: {path}") from None
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot read configuration file: {exc}") from exc

    return _parse_workspace_config(text, base_dir=path.parent, source_label=str(path))


def parse_overrides(mapping: object, source_label: str) -> ConfigOverrides:
    """Parse a per-entity ``config`` mapping into :class:`ConfigOverrides`.

    Raises:
        WorkspaceConfigError: On unknown keys or invalid values.
    """
    if not isinstance(mapping, dict):
        raise WorkspaceConfigError(f"{source_label} must be a YAML mapping")
    unknown = sorted(set(mapping) - _OVERRIDE_KEYS)
    if unknown:
        raise WorkspaceConfigError(f"{source_label}: unknown field(s) {', '.join(repr(k) for k in unknown)}")

    values = _common_settings(mapping, source_label)
    if "type-name" in mapping:
        values["type_name"] = _require_string(mapping, "type-name", source_label)
    if "type-mappings" in mapping:
        values["type_mappings"] = _parse_type_mappings(mapping["type-mappings"], source_label)
    try:
        return ConfigOverrides(**values)
    except ValidationError as exc:
        raise WorkspaceConfigError(f"{source_label}: {_first_error(exc)}") from exc


# ################
# Implementation
# ################

_SETTING_KEYS = frozenset(
    {
        "null-strategy",
        "export-style",
        "strict",
        "type-mappings",
        "type-name-transformers",
        "property-name-transformer",
    }
)
_TOP_LEVEL_KEYS = _SETTING_KEYS | {"output-directory", "schema-files"}
_OVERRIDE_KEYS = _SETTING_KEYS | {"type-name"}


def _parse_workspace_config(text: str, base_dir: Path, source_label: str = "<string>") -> WorkspaceConfig:
    """Parse configuration YAML text into a WorkspaceConfig.

    Args:
        text: Raw YAML content.
        base_dir: Directory relative paths are resolved against.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        WorkspaceConfigError: If the YAML is invalid or required fields are missing.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WorkspaceConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{source_label}: configuration must be a YAML mapping")

    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise WorkspaceConfigError(f"{source_label}: unknown field(s) {', '.join(repr(k) for k in unknown)}")

    output_directory = _require_string(data, "output-directory", source_label)

    values = _common_settings(data, source_label)
    values["output_dir"] = base_dir / output_directory
    if "type-mappings" in data:
        values["type_mappings"] = {
            **DEFAULT_TYPE_MAPPINGS,
            **_parse_type_mappings(data["type-mappings"], source_label),
        }
    try:
        layer = ConfigLayer(**values)
    except ValidationError as exc:
        raise WorkspaceConfigError(f"{source_label}: {_first_error(exc)}") from exc

    schema_files: list[Path] = []
    if "schema-files" in data:
        raw_files = data["schema-files"]
        if not isinstance(raw_files, list) or not all(isinstance(f, str) for f in raw_files):
            raise WorkspaceConfigError(f"{source_label}: 'schema-files' must be a list of strings")
        schema_files = [base_dir / f for f in raw_files]

    return WorkspaceConfig(layer=layer, schema_files=schema_files)


def _common_settings(mapping: dict[str, Any], source_label: str) -> dict[str, Any]:
    """Extract the settings shared by the global and per-entity layers."""
    values: dict[str, Any] = {}
    if "null-strategy" in mapping:
        values["null_strategy"] = _require_string(mapping, "null-strategy", source_label)
    if "export-style" in mapping:
        values["export_style"] = _require_string(mapping, "export-style", source_label)
    if "strict" in mapping:
        if not isinstance(mapping["strict"], bool):
            raise WorkspaceConfigError(f"{source_label}: 'strict' must be a boolean")
        values["strict"] = mapping["strict"]
    if "type-name-transformers" in mapping:
        raw = mapping["type-name-transformers"]
        if not isinstance(raw, list):
            raise WorkspaceConfigError(f"{source_label}: 'type-name-transformers' must be a list")
        values["type_name_transformers"] = tuple(
            _lookup_transformer(name, f"{source_label}: type-name-transformers[{index}]")
            for index, name in enumerate(raw)
        )
    if "property-name-transformer" in mapping:
        values["property_name_transformer"] = _lookup_transformer(
            mapping["property-name-transformer"], f"{source_label}: property-name-transformer"
        )
    return values


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a required string field from a mapping, raising WorkspaceConfigError if missing."""
    if key not in mapping:
        raise WorkspaceConfigError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str):
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be a string")
    return value


def _parse_type_mappings(raw: object, source_label: str) -> dict[str, str]:
    if not isinstance(raw, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in raw.items()):
        raise WorkspaceConfigError(f"{source_label}: 'type-mappings' must map strings to strings")
    return dict(raw)


def _lookup_transformer(name: object, location: str) -> NameTransformer:
    if not isinstance(name, str):
        raise WorkspaceConfigError(f"{location} must be a string")
    try:
        return named_transformer(name)
    except KeyError:
        raise WorkspaceConfigError(f"{location}: unknown transformer '{name}'") from None


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field_name = ".".join(str(part) for part in error["loc"])
    return f"invalid value for '{field_name}': {error['msg']}"
