# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entity descriptors supplied by discovery to the compiler."""

from __future__ import annotations

from pydantic import BaseModel, field_validator
from pydantic import Field as _Field

from typesync.model.config import ConfigOverrides
from typesync.model.types import Attribute

# ###############
# Public Interface
# ###############


class EntityDescriptor(BaseModel):
    """A record type to be compiled into one type declaration.

    Attributes:
        identity: Stable, globally unique key. Entity references point here.
        qualified_name: Dot-separated name, e.g. ``app.models.User``. An
            entity named ``app.models.User.Address`` is lexically owned by
            ``app.models.User``.
        attributes: Ordered attribute schema; names are unique.
        config: Optional per-entity configuration overrides.
    """

    identity: str
    qualified_name: str
    attributes: list[Attribute] = _Field(default_factory=list)
    config: ConfigOverrides | None = None

    @field_validator("attributes")
    @classmethod
    def check_unique_attribute_names(cls, attributes: list[Attribute]) -> list[Attribute]:
        seen: set[str] = set()
        for attribute in attributes:
            if attribute.name in seen:
                raise ValueError(f"duplicate attribute name '{attribute.name}'")
            seen.add(attribute.name)
        return attributes

    @property
    def short_name(self) -> str:
        """The last segment of the qualified name."""
        return self.qualified_name.rsplit(".", 1)[-1]

    def owns(self, other: EntityDescriptor) -> bool:
        """Return True if *other* is lexically nested inside this entity."""
        return other.qualified_name.startswith(self.qualified_name + ".")


def entity(
    qualified_name: str,
    attributes: list[Attribute] | None = None,
    *,
    identity: str | None = None,
    config: ConfigOverrides | None = None,
) -> EntityDescriptor:
    """Build an :class:`EntityDescriptor` whose identity defaults to its qualified name."""
    return EntityDescriptor(
        identity=identity if identity is not None else qualified_name,
        qualified_name=qualified_name,
        attributes=attributes or [],
        config=config,
    )
