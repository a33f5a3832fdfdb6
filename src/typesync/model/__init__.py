# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entity, type node and configuration models."""

from typesync.model.config import (
    DEFAULT_TYPE_MAPPINGS,
    ConfigError,
    ConfigLayer,
    ConfigOverrides,
    ExportStyle,
    NameTransformer,
    NullStrategy,
)
from typesync.model.entities import EntityDescriptor, entity
from typesync.model.types import (
    ArrayNode,
    Attribute,
    ConstrainedNode,
    EntityRefNode,
    InlineRecordNode,
    OptionalNode,
    PrimitiveNode,
    TypeNode,
    UnionNode,
    UnknownNode,
    unwrap_constrained,
)

__all__ = [
    # Type nodes
    "PrimitiveNode",
    "OptionalNode",
    "ArrayNode",
    "UnionNode",
    "EntityRefNode",
    "InlineRecordNode",
    "ConstrainedNode",
    "UnknownNode",
    "TypeNode",
    "Attribute",
    "unwrap_constrained",
    # Entities
    "EntityDescriptor",
    "entity",
    # Configuration
    "DEFAULT_TYPE_MAPPINGS",
    "ConfigError",
    "ConfigLayer",
    "ConfigOverrides",
    "ExportStyle",
    "NameTransformer",
    "NullStrategy",
]
