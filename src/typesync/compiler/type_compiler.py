# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compilation of a single type node into TypeScript type syntax.

The compiler knows nothing about entities or files. Entity references and
inline records are delegated to two hooks that the entity compiler overrides;
on their own they are treated as unsupported nodes.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from typesync.model.config import DEFAULT_TYPE_MAPPINGS
from typesync.model.types import (
    ArrayNode,
    ConstrainedNode,
    EntityRefNode,
    InlineRecordNode,
    OptionalNode,
    PrimitiveNode,
    TypeNode,
    UnionNode,
    UnknownNode,
)

# ###############
# Public Interface
# ###############

NULL = "null"
UNKNOWN = "unknown"
UNION_SEPARATOR = " | "
INTERSECTION_SEPARATOR = " & "

_OPENERS = {"(": ")", "[": "]", "{": "}", "<": ">"}
_CLOSERS = frozenset(_OPENERS.values())
_QUOTES = frozenset({'"', "'", "`"})


def split_top_level(text: str, separator: str) -> list[str]:
    """Split *text* on *separator* occurrences outside any brackets or quotes."""
    parts: list[str] = []
    depth = 0
    quote: str | None = None
    start = 0
    i = 0
    while i < len(text):
        char = text[i]
        if quote is not None:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS and not (char == ">" and text[i - 1 : i] == "="):
            depth -= 1
        elif depth == 0 and text.startswith(separator, i):
            parts.append(text[start:i])
            i += len(separator)
            start = i
            continue
        i += 1
    parts.append(text[start:])
    return parts


class UnsupportedTypeError(Exception):
    """Raised in strict mode for a type node that has no TypeScript rendering."""

    def __init__(self, kind: str, detail: str | None = None) -> None:
        self.kind = kind
        message = f"Unsupported type node: {kind}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


def split_union(text: str) -> list[str]:
    """Split *text* on top-level union separators.

    Separators nested inside parentheses, brackets, braces, angle brackets or
    string literals are ignored, so ``(a | b)[]`` and ``{ x: a | b }`` stay
    whole.
    """
    return split_top_level(text, UNION_SEPARATOR)


def has_top_level_operator(text: str) -> bool:
    """Return True if *text* is a bare union or intersection expression."""
    return (
        len(split_top_level(text, UNION_SEPARATOR)) > 1
        or len(split_top_level(text, INTERSECTION_SEPARATOR)) > 1
    )


def normalize_union(members: Iterable[str]) -> str:
    """Flatten, deduplicate and order compiled union members.

    Members that are themselves top-level unions are spliced in, duplicates
    are dropped keeping the first occurrence, and ``null`` moves to the end.
    A single remaining member is returned unwrapped.
    """
    parts: list[str] = []
    for member in members:
        for part in split_union(member):
            if part not in parts:
                parts.append(part)
    if NULL in parts:
        parts.remove(NULL)
        parts.append(NULL)
    if len(parts) == 1:
        return parts[0]
    return UNION_SEPARATOR.join(parts)


def wrap_array_member(text: str) -> str:
    """Return the array type of *text*, parenthesized where precedence requires."""
    if has_top_level_operator(text):
        text = f"({text})"
    return f"{text}[]"


class TypeCompiler:
    """Compile :data:`~typesync.model.types.TypeNode` trees to TypeScript text.

    Args:
        type_mappings: Primitive kind to emitted text. Defaults to
            :data:`~typesync.model.config.DEFAULT_TYPE_MAPPINGS`.
        strict: Raise :class:`UnsupportedTypeError` for unmapped primitives
            and unsupported nodes instead of emitting ``unknown``.
    """

    def __init__(self, type_mappings: Mapping[str, str] | None = None, *, strict: bool = False) -> None:
        self._type_mappings = dict(DEFAULT_TYPE_MAPPINGS if type_mappings is None else type_mappings)
        self._strict = strict

    @property
    def strict(self) -> bool:
        return self._strict

    def compile(self, node: TypeNode) -> str:
        """Return the TypeScript text for *node*."""
        if isinstance(node, PrimitiveNode):
            return self._visit_primitive(node)
        if isinstance(node, OptionalNode):
            return normalize_union([self.compile(node.inner), NULL])
        if isinstance(node, UnionNode):
            if not node.members:
                return self.unsupported("union", "no members")
            return normalize_union([self.compile(member) for member in node.members])
        if isinstance(node, ArrayNode):
            return wrap_array_member(self.compile(node.inner))
        if isinstance(node, ConstrainedNode):
            return self.compile(node.inner)
        if isinstance(node, EntityRefNode):
            return self._visit_entity_ref(node)
        if isinstance(node, InlineRecordNode):
            return self._visit_inline_record(node)
        if isinstance(node, UnknownNode):
            return UNKNOWN
        return self.unsupported(type(node).__name__)

    def unsupported(self, kind: str, detail: str | None = None) -> str:
        """Fail in strict mode, otherwise degrade to ``unknown``."""
        if self._strict:
            raise UnsupportedTypeError(kind, detail)
        return UNKNOWN

    # Hooks for entity-aware subclasses.

    def _visit_entity_ref(self, node: EntityRefNode) -> str:
        return self.unsupported("entity", node.identity)

    def _visit_inline_record(self, node: InlineRecordNode) -> str:
        return self.unsupported("record")

    def _visit_primitive(self, node: PrimitiveNode) -> str:
        mapped = self._type_mappings.get(node.primitive)
        if mapped is None:
            return self.unsupported("primitive", node.primitive)
        return mapped
