# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entity discovery from YAML schema files.

A schema file lists entities by qualified name together with their
attributes::

    entities:
      - name: app.models.User
        config:
          type-name: UserDTO
        attributes:
          - name: address
            type: app.models.Address
          - name: tags
            type: str[]
          - name: age
            type: int?
            required: false

Type expressions are either strings (``a | b``, ``T?``, ``T[]``, ``(T)``,
``unknown``, an entity name or a primitive kind) or single-key mappings
(``optional``, ``array``, ``union``, ``constrained``, ``entity``, ``record``).
The qualified name of an entity doubles as its identity.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic import Field as _Field

from typesync.compiler.type_compiler import split_top_level
from typesync.model.entities import EntityDescriptor
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
)
from typesync.workspace.config import WorkspaceConfigError, parse_overrides

# ###############
# Public Interface
# ###############


class SchemaFileError(Exception):
    """Raised when a schema file cannot be read or describes invalid entities."""


def load_schema_files(paths: Iterable[Path]) -> list[EntityDescriptor]:
    """Load the entities declared in *paths*, in file and declaration order.

    Entity references may cross files.

    Raises:
        SchemaFileError: If a file cannot be read, is not valid YAML, or
            declares an invalid or duplicate entity.
    """
    documents = [(path, _read_document(path)) for path in paths]

    known: dict[str, Path] = {}
    for path, document in documents:
        for raw in document.entities:
            if raw.name in known:
                raise SchemaFileError(f"{path}: entity '{raw.name}' is already declared in {known[raw.name]}")
            known[raw.name] = path

    entities: list[EntityDescriptor] = []
    for path, document in documents:
        for index, raw in enumerate(document.entities):
            location = f"{path}: entities[{index}] '{raw.name}'"
            parser = _TypeParser(frozenset(known), location)
            entities.append(parser.entity(raw))
    return entities


def parse_type_expression(expression: object, entity_names: Iterable[str] = ()) -> TypeNode:
    """Parse a single type expression as used in schema files.

    Raises:
        SchemaFileError: If the expression is malformed.
    """
    return _TypeParser(frozenset(entity_names), "<expression>").node(expression)


# ################
# Implementation
# ################

_PRIMITIVE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class _RawAttribute(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    type: Any
    required: bool = True


class _RawEntity(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    attributes: list[_RawAttribute] = _Field(default_factory=list)
    config: dict[str, Any] | None = None


class _RawDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entities: list[_RawEntity] = _Field(default_factory=list)


def _read_document(path: Path) -> _RawDocument:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaFileError(f"Cannot read schema file '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise SchemaFileError(f"Invalid YAML in schema file '{path}': {exc}") from exc

    if data is None:
        data = {}

    try:
        return _RawDocument.model_validate(data)
    except ValidationError as exc:
        raise SchemaFileError(f"Invalid schema file '{path}': {exc}") from exc


class _TypeParser:
    """Turns raw YAML values into type nodes for one entity."""

    def __init__(self, entity_names: frozenset[str], location: str) -> None:
        self._entity_names = entity_names
        self._location = location

    def entity(self, raw: _RawEntity) -> EntityDescriptor:
        overrides = None
        if raw.config is not None:
            try:
                overrides = parse_overrides(raw.config, f"{self._location} config")
            except WorkspaceConfigError as exc:
                raise SchemaFileError(str(exc)) from exc
        try:
            return EntityDescriptor(
                identity=raw.name,
                qualified_name=raw.name,
                attributes=self.attributes(raw.attributes),
                config=overrides,
            )
        except ValidationError as exc:
            raise SchemaFileError(f"{self._location}: {exc.errors()[0]['msg']}") from exc

    def attributes(self, raw_attributes: list[_RawAttribute]) -> list[Attribute]:
        return [Attribute(name=a.name, type=self.node(a.type), required=a.required) for a in raw_attributes]

    def node(self, value: object) -> TypeNode:
        if isinstance(value, str):
            return self._expression(value)
        if isinstance(value, dict):
            return self._mapping(value)
        raise SchemaFileError(f"{self._location}: invalid type expression {value!r}")

    def _expression(self, text: str) -> TypeNode:
        text = text.strip()
        members = [m.strip() for m in split_top_level(text, "|")]
        if len(members) > 1:
            return UnionNode(members=[self._expression(m) for m in members])
        if text.endswith("?"):
            return OptionalNode(inner=self._expression(text[:-1]))
        if text.endswith("[]"):
            return ArrayNode(inner=self._expression(text[:-2]))
        if text.startswith("(") and text.endswith(")"):
            return self._expression(text[1:-1])
        if text == "unknown":
            return UnknownNode()
        if text in self._entity_names:
            return EntityRefNode(identity=text)
        if _PRIMITIVE.fullmatch(text):
            return PrimitiveNode(primitive=text)
        raise SchemaFileError(f"{self._location}: invalid type expression '{text}'")

    def _mapping(self, value: dict[str, Any]) -> TypeNode:
        if "constrained" in value:
            extra = set(value) - {"constrained", "rule"}
            if extra:
                raise SchemaFileError(f"{self._location}: unexpected key(s) {sorted(extra)} in constrained type")
            rule = value.get("rule")
            return ConstrainedNode(inner=self.node(value["constrained"]), rule=None if rule is None else str(rule))
        if len(value) != 1:
            raise SchemaFileError(f"{self._location}: a type mapping must have exactly one key, got {sorted(value)}")
        ((key, inner),) = value.items()
        if key == "optional":
            return OptionalNode(inner=self.node(inner))
        if key == "array":
            return ArrayNode(inner=self.node(inner))
        if key == "union":
            if not isinstance(inner, list) or not inner:
                raise SchemaFileError(f"{self._location}: 'union' must be a non-empty list of types")
            return UnionNode(members=[self.node(m) for m in inner])
        if key == "entity":
            if inner not in self._entity_names:
                raise SchemaFileError(f"{self._location}: unknown entity '{inner}'")
            return EntityRefNode(identity=inner)
        if key == "record":
            if not isinstance(inner, list):
                raise SchemaFileError(f"{self._location}: 'record' must be a list of attributes")
            try:
                fields = [_RawAttribute.model_validate(f) for f in inner]
            except ValidationError as exc:
                raise SchemaFileError(f"{self._location}: invalid record attribute: {exc}") from exc
            return InlineRecordNode(fields=self.attributes(fields))
        raise SchemaFileError(f"{self._location}: unknown type constructor '{key}'")
