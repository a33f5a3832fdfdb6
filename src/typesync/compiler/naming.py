# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Emitted type names and property keys."""

from __future__ import annotations

import re

from typesync import transformers
from typesync.model.config import ConfigLayer, NameTransformer
from typesync.model.entities import EntityDescriptor

# ###############
# Public Interface
# ###############

RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "break", "case", "catch", "class", "const", "continue", "debugger", "default",
        "delete", "do", "else", "enum", "export", "extends", "false", "finally", "for",
        "function", "if", "import", "in", "instanceof", "new", "null", "return", "super",
        "switch", "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
        "as", "implements", "interface", "let", "package", "private", "protected", "public",
        "static", "yield",
    }
)  # fmt: skip


def resolve_type_name(
    entity: EntityDescriptor,
    config: ConfigLayer,
    *,
    type_name: str | None = None,
) -> str:
    """Return the emitted type name of *entity*.

    Precedence: the explicit *type_name*, then the entity's ``type_name``
    override, then the configured transformer chain applied to the qualified
    name, then the last segment of the qualified name.
    """
    if type_name is not None:
        return type_name
    overrides = entity.config
    if overrides is not None and overrides.type_name is not None:
        return overrides.type_name
    chain = config.merge(overrides).type_name_transformers
    if chain:
        return transformers.apply(chain, entity.qualified_name)
    return entity.short_name


def is_identifier(name: str) -> bool:
    """Return True if *name* can be used as an unquoted property key."""
    if not name or name in RESERVED_WORDS:
        return False
    return _IDENTIFIER.fullmatch(name) is not None


def format_property_name(name: str, transformer: NameTransformer | None = None) -> str:
    """Transform *name* and quote it when it is not a plain identifier."""
    if transformer is not None:
        name = transformer(name)
    if is_identifier(name):
        return name
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


# ################
# Implementation
# ################

_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
