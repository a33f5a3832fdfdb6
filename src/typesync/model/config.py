# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Configuration layers controlling how entities are compiled and written.

A :class:`ConfigLayer` is an immutable snapshot. Per-entity
:class:`ConfigOverrides` are merged over it with :meth:`ConfigLayer.merge`,
which always produces a new snapshot with its own copy of the type mappings,
so mutating a layer after the fact never changes a snapshot already handed out.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############

NameTransformer = Callable[[str], str]

DEFAULT_TYPE_MAPPINGS: dict[str, str] = {
    "str": "string",
    "uuid": "string",
    "date": "string",
    "datetime": "string",
    "time": "string",
    "timedelta": "string",
    "int": "number",
    "float": "number",
    "decimal": "number",
    "bool": "boolean",
    "none": "null",
    "dict": "Record<string, unknown>",
    "any": "unknown",
}


class ConfigError(Exception):
    """Raised when a configuration snapshot cannot be used for an operation."""


class NullStrategy(str, Enum):
    """How nullable attributes are represented in the emitted declaration."""

    NULLABLE = "nullable"
    OPTIONAL = "optional"
    NULLABLE_AND_OPTIONAL = "nullable_and_optional"


class ExportStyle(str, Enum):
    """Whether declarations use named or default exports."""

    NAMED = "named"
    DEFAULT = "default"


class ConfigOverrides(BaseModel):
    """Per-entity configuration layer. ``None`` means "inherit"."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type_name: str | None = None
    null_strategy: NullStrategy | None = None
    export_style: ExportStyle | None = None
    strict: bool | None = None
    type_mappings: dict[str, str] | None = None
    type_name_transformers: tuple[NameTransformer, ...] | None = None
    property_name_transformer: NameTransformer | None = None


class ConfigLayer(BaseModel):
    """Global compilation and output settings.

    Attributes:
        output_dir: Directory receiving the generated files.
        null_strategy: Representation of nullable attributes.
        export_style: Named or default export of each declaration.
        strict: Fail on unsupported types instead of emitting ``unknown``.
        type_mappings: Primitive kind to emitted type text.
        type_name_transformers: Applied left to right to the qualified name.
        property_name_transformer: Applied to every attribute name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    output_dir: Path | None = None
    null_strategy: NullStrategy = NullStrategy.NULLABLE
    export_style: ExportStyle = ExportStyle.NAMED
    strict: bool = False
    type_mappings: dict[str, str] = _Field(default_factory=lambda: dict(DEFAULT_TYPE_MAPPINGS))
    type_name_transformers: tuple[NameTransformer, ...] = ()
    property_name_transformer: NameTransformer | None = None

    def merge(self, overrides: ConfigOverrides | None) -> ConfigLayer:
        """Return a new snapshot with every non-``None`` override applied."""
        data: dict[str, Any] = {name: getattr(self, name) for name in type(self).model_fields}
        if overrides is not None:
            for name in ConfigOverrides.model_fields:
                value = getattr(overrides, name)
                if value is not None and name in data:
                    data[name] = value
        data["type_mappings"] = dict(data["type_mappings"])
        return ConfigLayer(**data)
