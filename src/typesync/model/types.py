# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type node representations for entity attribute schemas."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class PrimitiveNode(BaseModel):
    """A primitive type identified by its kind (e.g. ``str``, ``int``)."""

    kind: Literal["primitive"] = "primitive"
    primitive: str


class OptionalNode(BaseModel):
    """A type that also admits null."""

    kind: Literal["optional"] = "optional"
    inner: TypeNode


class ArrayNode(BaseModel):
    """A homogeneous array of the inner type."""

    kind: Literal["array"] = "array"
    inner: TypeNode


class UnionNode(BaseModel):
    """A union of member types, in declaration order."""

    kind: Literal["union"] = "union"
    members: list[TypeNode] = _Field(default_factory=list)


class EntityRefNode(BaseModel):
    """A reference to another entity by its identity."""

    kind: Literal["entity"] = "entity"
    identity: str


class InlineRecordNode(BaseModel):
    """An anonymous record owned by the attribute that declares it."""

    kind: Literal["record"] = "record"
    fields: list[Attribute] = _Field(default_factory=list)


class ConstrainedNode(BaseModel):
    """A refined type; the constraint has no representation in the output."""

    kind: Literal["constrained"] = "constrained"
    inner: TypeNode
    rule: str | None = None


class UnknownNode(BaseModel):
    """A type the discovery side could not describe."""

    kind: Literal["unknown"] = "unknown"
    description: str | None = None


# One attribute type. The `kind` discriminator keeps validation unambiguous.
TypeNode = Annotated[
    PrimitiveNode
    | OptionalNode
    | ArrayNode
    | UnionNode
    | EntityRefNode
    | InlineRecordNode
    | ConstrainedNode
    | UnknownNode,
    _Field(discriminator="kind"),
]


class Attribute(BaseModel):
    """A named, typed attribute of an entity or inline record."""

    name: str
    type: TypeNode
    required: bool = True


def unwrap_constrained(node: TypeNode) -> TypeNode:
    """Strip any number of ConstrainedNode wrappers from *node*."""
    while isinstance(node, ConstrainedNode):
        node = node.inner
    return node


# Resolve forward references for models that use TypeNode.
OptionalNode.model_rebuild()
ArrayNode.model_rebuild()
UnionNode.model_rebuild()
InlineRecordNode.model_rebuild()
ConstrainedNode.model_rebuild()
Attribute.model_rebuild()
