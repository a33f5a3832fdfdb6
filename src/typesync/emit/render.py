# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of generated file contents, shared by the writer and the checker.

Every generated file starts with a fingerprint header line followed by a
blank line::

    // typesync fingerprint: 0123456789abcdef0123456789abcdef

The fingerprint is derived from the rest of the file, so comparing the first
line is enough to know whether a file is current.
"""

from __future__ import annotations

import hashlib
from collections.abc import Collection, Mapping, Sequence
from pathlib import Path

from typesync.compiler.entity_compiler import CompiledUnit, compile_entity
from typesync.compiler.graph import batch_registry
from typesync.compiler.naming import resolve_type_name
from typesync.model.config import ConfigLayer, ExportStyle
from typesync.model.entities import EntityDescriptor

# ###############
# Public Interface
# ###############

FINGERPRINT_PREFIX = "// typesync fingerprint:"
FILE_SUFFIX = ".ts"
INDEX_FILE_NAME = "index" + FILE_SUFFIX


def compute_fingerprint(content: str) -> str:
    """Return the 32 hex digit content fingerprint of *content*."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:32]


def fingerprint_header(content: str) -> str:
    """Return the header line identifying *content*."""
    return f"{FINGERPRINT_PREFIX} {compute_fingerprint(content)}"


def with_header(content: str) -> str:
    """Prefix *content* with its fingerprint header and a blank line."""
    return f"{fingerprint_header(content)}\n\n{content}"


def strip_header(text: str) -> str:
    """Remove the fingerprint header (and the blank line after it), if present."""
    if not text.startswith(FINGERPRINT_PREFIX):
        return text
    _, _, rest = text.partition("\n")
    if rest.startswith("\r\n"):
        return rest[2:]
    if rest.startswith("\n"):
        return rest[1:]
    return rest


def read_first_line(path: Path) -> str | None:
    """Return the first line of *path* without its line ending, or None if absent.

    Bytes that are not valid UTF-8 are replaced, so hand-written files in
    other encodings are read without error.
    """
    if not path.is_file():
        return None
    with path.open("rb") as handle:
        return handle.readline().decode("utf-8", errors="replace").rstrip("\r\n")


def is_generated(path: Path) -> bool:
    """Return True if *path* carries a fingerprint header."""
    first_line = read_first_line(path)
    return first_line is not None and first_line.startswith(FINGERPRINT_PREFIX)


def file_name(entity: EntityDescriptor, config: ConfigLayer) -> str:
    """Return the generated file name of *entity*."""
    return resolve_type_name(entity, config) + FILE_SUFFIX


def import_statement(entity: EntityDescriptor, config: ConfigLayer) -> str:
    """Return the import of *entity*'s declaration, matching its export style."""
    name = resolve_type_name(entity, config)
    if config.merge(entity.config).export_style is ExportStyle.DEFAULT:
        return f"import {name} from './{name}'"
    return f"import type {{ {name} }} from './{name}'"


def index_export(entity: EntityDescriptor, config: ConfigLayer) -> str:
    """Return the index re-export of *entity*'s declaration."""
    name = resolve_type_name(entity, config)
    if config.merge(entity.config).export_style is ExportStyle.DEFAULT:
        return f"export {{ default as {name} }} from './{name}'"
    return f"export type {{ {name} }} from './{name}'"


def render_entity(
    unit: CompiledUnit,
    config: ConfigLayer,
    *,
    batch: Collection[str] | None = None,
) -> str:
    """Render the file content (without header) of a compiled entity.

    Args:
        unit: The compiled entity.
        config: Global configuration.
        batch: Identities being generated together. Dependencies outside it
            get no import; ``None`` imports every dependency.
    """
    dependencies = [dep for dep in unit.dependencies if batch is None or dep.identity in batch]
    dependencies.sort(key=lambda dep: resolve_type_name(dep, config))
    imports = "\n".join(import_statement(dep, config) for dep in dependencies)
    if not imports:
        return f"{unit.body_text}\n"
    return f"{imports}\n\n{unit.body_text}\n"


def render_index(entities: Sequence[EntityDescriptor], config: ConfigLayer) -> str:
    """Render the index file content (without header) for *entities*."""
    ordered = sorted(entities, key=lambda e: resolve_type_name(e, config))
    return "".join(index_export(e, config) + "\n" for e in ordered)


def render_batch(
    entities: Sequence[EntityDescriptor],
    config: ConfigLayer,
    *,
    registry: Mapping[str, EntityDescriptor] | None = None,
) -> dict[str, str]:
    """Render every file of a batch, headers included, keyed by file name.

    The index file is always included.
    """
    registry = batch_registry(entities, registry)
    batch = {e.identity for e in entities}
    files: dict[str, str] = {}
    for entity in entities:
        unit = compile_entity(entity, config, registry=registry)
        files[file_name(entity, config)] = with_header(render_entity(unit, config, batch=batch))
    files[INDEX_FILE_NAME] = with_header(render_index(entities, config))
    return files
