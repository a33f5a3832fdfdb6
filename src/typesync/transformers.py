# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Reusable name transformers for type names and property names.

Every transformer is a pure ``str -> str`` callable. Type name transformers
receive the dot-separated qualified name of an entity and are applied left to
right; the property name transformer receives a single attribute name.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from typesync.model.config import NameTransformer

# ###############
# Public Interface
# ###############


def apply(transformers: Iterable[NameTransformer], name: str) -> str:
    """Apply *transformers* to *name* in order."""
    for transformer in transformers:
        name = transformer(name)
    return name


def last_segment(name: str) -> str:
    """``app.models.User`` -> ``User``."""
    return name.rsplit(".", 1)[-1]


def join_segments(name: str) -> str:
    """``app.models.User.Address`` -> ``appmodelsUserAddress``."""
    return "".join(name.split("."))


def strip_suffix(suffix: str) -> NameTransformer:
    """Return a transformer removing *suffix* from the end of a name."""

    def _strip(name: str) -> str:
        return name.removesuffix(suffix)

    return _strip


def strip_prefix(prefix: str) -> NameTransformer:
    """Return a transformer removing *prefix* from the start of a name."""

    def _strip(name: str) -> str:
        return name.removeprefix(prefix)

    return _strip


def camel_case(name: str) -> str:
    """``created_at`` -> ``createdAt``."""
    head, *rest = _words(name)
    return head.lower() + "".join(word[:1].upper() + word[1:] for word in rest)


def pascal_case(name: str) -> str:
    """``created_at`` -> ``CreatedAt``."""
    return "".join(word[:1].upper() + word[1:] for word in _words(name))


def snake_case(name: str) -> str:
    """``createdAt`` -> ``created_at``."""
    spaced = _CAMEL_BOUNDARY.sub(r"\1_\2", name)
    return "_".join(word.lower() for word in _words(spaced))


def named_transformer(setting: str) -> NameTransformer:
    """Look up a transformer by its configuration name.

    Accepted names are ``last-segment``, ``join-segments``, ``camel-case``,
    ``pascal-case``, ``snake-case``, ``strip-suffix:<text>`` and
    ``strip-prefix:<text>``.

    Raises:
        KeyError: If *setting* names no known transformer.
    """
    name, sep, argument = setting.partition(":")
    if sep:
        if name not in _PARAMETERIZED:
            raise KeyError(setting)
        return _PARAMETERIZED[name](argument)
    return _SIMPLE[name]


# ################
# Implementation
# ################

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def _words(name: str) -> list[str]:
    words = [word for word in re.split(r"[_\-\s]+", name) if word]
    return words or [""]


_SIMPLE: dict[str, NameTransformer] = {
    "last-segment": last_segment,
    "join-segments": join_segments,
    "camel-case": camel_case,
    "pascal-case": pascal_case,
    "snake-case": snake_case,
}

_PARAMETERIZED = {
    "strip-suffix": strip_suffix,
    "strip-prefix": strip_prefix,
}
