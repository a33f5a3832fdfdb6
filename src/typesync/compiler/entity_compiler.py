# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compilation of one entity into a TypeScript type declaration.

Entity references are resolved against an explicit in-progress stack seeded
with the entity being compiled:

1. A reference to the root entity emits the root's own type name.
2. A reference to an entity already on the stack emits its type name; no
   dependency is recorded, which breaks reference cycles.
3. A reference to an entity lexically nested in the entity on top of the
   stack (``app.User.Address`` inside ``app.User``) is compiled in place as an
   anonymous record literal.
4. Any other reference is an external dependency and emits the referenced
   entity's type name.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from typesync.compiler.naming import format_property_name, resolve_type_name
from typesync.compiler.type_compiler import NULL, UNION_SEPARATOR, TypeCompiler, split_union
from typesync.model.config import ConfigLayer, ExportStyle, NullStrategy
from typesync.model.entities import EntityDescriptor
from typesync.model.types import (
    Attribute,
    EntityRefNode,
    InlineRecordNode,
    OptionalNode,
    TypeNode,
    UnionNode,
    unwrap_constrained,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class CompiledUnit:
    """The compiled declaration of one entity.

    Attributes:
        type_name: The emitted type name.
        body_text: The full declaration including its export.
        dependencies: External entities referenced by the declaration,
            unique by identity, in order of first reference.
    """

    type_name: str
    body_text: str
    dependencies: tuple[EntityDescriptor, ...] = ()


def compile_entity(
    entity: EntityDescriptor,
    config: ConfigLayer,
    *,
    registry: Mapping[str, EntityDescriptor] | None = None,
    type_name: str | None = None,
) -> CompiledUnit:
    """Compile *entity* under *config*.

    Args:
        entity: The entity to compile.
        config: The global configuration; the entity's overrides are merged
            over it.
        registry: Known entities by identity, used to resolve entity
            references. Defaults to *entity* alone.
        type_name: Explicit emitted name, taking precedence over any
            configured name.

    Returns:
        The :class:`CompiledUnit` for *entity*.

    Raises:
        UnsupportedTypeError: In strict mode, for unsupported type nodes and
            references to entities missing from *registry*.
    """
    if registry is None:
        registry = {entity.identity: entity}
    return _EntityCompiler(entity, config, registry, type_name).compile()


def is_nullable(node: TypeNode, compiled: str) -> bool:
    """Return True if *node* admits null at the top level of *compiled*."""
    node = unwrap_constrained(node)
    if not isinstance(node, (OptionalNode, UnionNode)):
        return False
    return NULL in split_union(compiled)


def strip_null(compiled: str) -> str:
    """Remove the top-level ``null`` member from a compiled union."""
    parts = [part for part in split_union(compiled) if part != NULL]
    if not parts:
        return compiled
    return UNION_SEPARATOR.join(parts)


# ################
# Implementation
# ################


class _EntityAwareTypeCompiler(TypeCompiler):
    """Type compiler that hands entity-shaped nodes back to the entity compiler."""

    def __init__(self, owner: _EntityCompiler, config: ConfigLayer) -> None:
        super().__init__(config.type_mappings, strict=config.strict)
        self._owner = owner

    def _visit_entity_ref(self, node: EntityRefNode) -> str:
        target = self._owner.lookup(node.identity)
        if target is None:
            compiled = self.unsupported("entity", f"unresolved reference '{node.identity}'")
            logger.warning("Unresolved entity reference %r compiled as %s", node.identity, compiled)
            return compiled
        return self._owner.reference(target)

    def _visit_inline_record(self, node: InlineRecordNode) -> str:
        return self._owner.record_literal(node.fields)


class _EntityCompiler:
    """Compiles a single entity; one instance per call."""

    def __init__(
        self,
        entity: EntityDescriptor,
        config: ConfigLayer,
        registry: Mapping[str, EntityDescriptor],
        type_name: str | None,
    ) -> None:
        self._root = entity
        self._base_config = config
        self._config = config.merge(entity.config)
        self._registry = registry
        self._type_name = resolve_type_name(entity, config, type_name=type_name)
        self._types = _EntityAwareTypeCompiler(self, self._config)
        self._stack: list[EntityDescriptor] = [entity]
        self._dependencies: dict[str, EntityDescriptor] = {}

    def compile(self) -> CompiledUnit:
        lines = [f"  {self._member(attribute)}" for attribute in self._root.attributes]
        return CompiledUnit(
            type_name=self._type_name,
            body_text=self._declaration(lines),
            dependencies=tuple(self._dependencies.values()),
        )

    def lookup(self, identity: str) -> EntityDescriptor | None:
        return self._registry.get(identity)

    def reference(self, target: EntityDescriptor) -> str:
        """Resolve a reference to *target* according to the stack rules."""
        if target.identity == self._root.identity:
            return self._type_name
        if any(frame.identity == target.identity for frame in self._stack):
            return resolve_type_name(target, self._base_config)
        if self._stack[-1].owns(target):
            self._stack.append(target)
            try:
                return self.record_literal(target.attributes)
            finally:
                self._stack.pop()
        self._dependencies.setdefault(target.identity, target)
        return resolve_type_name(target, self._base_config)

    def record_literal(self, fields: list[Attribute]) -> str:
        """Render *fields* as an anonymous record literal."""
        if not fields:
            return "{}"
        members = []
        for field in fields:
            marker = "" if field.required else "?"
            key = format_property_name(field.name, self._config.property_name_transformer)
            members.append(f"{key}{marker}: {self._types.compile(field.type)}")
        return "{ " + "; ".join(members) + " }"

    def _member(self, attribute: Attribute) -> str:
        compiled = self._types.compile(attribute.type)
        nullable = is_nullable(attribute.type, compiled)
        strategy = self._config.null_strategy

        marker = ""
        if not attribute.required:
            marker = "?"
        elif nullable and strategy in (NullStrategy.OPTIONAL, NullStrategy.NULLABLE_AND_OPTIONAL):
            marker = "?"

        if nullable and strategy is NullStrategy.OPTIONAL:
            compiled = strip_null(compiled)

        key = format_property_name(attribute.name, self._config.property_name_transformer)
        return f"{key}{marker}: {compiled};"

    def _declaration(self, lines: list[str]) -> str:
        body = "{\n" + "\n".join(lines) + "\n}" if lines else "{}"
        declaration = f"type {self._type_name} = {body}"
        if self._config.export_style is ExportStyle.DEFAULT:
            return f"{declaration}\nexport default {self._type_name}"
        return f"export {declaration}"
