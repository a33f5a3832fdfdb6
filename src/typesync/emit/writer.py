# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Synchronization of compiled declarations to the output directory.

Writes are idempotent and atomic per file: a file whose fingerprint header
already matches the rendered content is left untouched, and every real write
goes through a temporary file in the destination directory that is renamed
into place. A batch as a whole is not atomic; re-running heals a batch that
was interrupted half way.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from typesync.compiler.entity_compiler import compile_entity
from typesync.compiler.graph import batch_registry
from typesync.emit.render import (
    FILE_SUFFIX,
    INDEX_FILE_NAME,
    file_name,
    fingerprint_header,
    is_generated,
    read_first_line,
    render_entity,
    render_index,
    with_header,
)
from typesync.model.config import ConfigError, ConfigLayer
from typesync.model.entities import EntityDescriptor

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class NameCollisionError(Exception):
    """Raised when distinct entities resolve to the same output file name."""

    def __init__(self, names: list[str]) -> None:
        self.names = names
        super().__init__(
            f"Type name collision detected: {', '.join(names)}. "
            "Multiple entities resolve to the same output file name."
        )


@dataclass(frozen=True)
class WriteResult:
    """Paths produced by :meth:`Writer.write_all`.

    Attributes:
        files: One path per entity, in batch order.
        index: Path of the index file.
    """

    files: list[Path]
    index: Path


class Writer:
    """Write entity declarations and the index file to an output directory.

    Args:
        config: Global configuration.
        output_dir: Target directory; defaults to ``config.output_dir``.
        registry: Entities available for reference resolution, by identity.
            Defaults to the entities passed to each call.

    Raises:
        ConfigError: If neither *output_dir* nor ``config.output_dir`` is set.
    """

    def __init__(
        self,
        config: ConfigLayer,
        output_dir: Path | None = None,
        *,
        registry: Mapping[str, EntityDescriptor] | None = None,
    ) -> None:
        directory = output_dir if output_dir is not None else config.output_dir
        if directory is None:
            raise ConfigError("No output directory configured")
        self._config = config
        self._output_dir = Path(directory)
        self._registry = registry

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def write(self, entity: EntityDescriptor, *, force: bool = False) -> Path:
        """Write the declaration of a single entity, importing all its dependencies.

        References resolve against the writer's registry and *entity* itself.
        Without a registry, references to other entities cannot resolve; they
        compile to ``unknown`` with a logged warning (strict mode raises).
        """
        return self._write_entity(entity, batch_registry([entity], self._registry), batch=None, force=force)

    def write_all(self, entities: Sequence[EntityDescriptor], *, force: bool = False) -> WriteResult:
        """Write every entity of a batch plus the index file.

        Imports are limited to dependencies that are part of the batch.

        Raises:
            NameCollisionError: Before any file is written, if two distinct
                entities resolve to the same file name.
        """
        self._detect_collisions(entities)
        registry = batch_registry(entities, self._registry)
        batch = {e.identity for e in entities}
        files = [self._write_entity(e, registry, batch=batch, force=force) for e in entities]
        index = self.write_index(entities, force=force)
        return WriteResult(files=files, index=index)

    def write_index(self, entities: Sequence[EntityDescriptor], *, force: bool = False) -> Path:
        """Write the index file re-exporting every entity of *entities*."""
        return self._sync(self._output_dir / INDEX_FILE_NAME, render_index(entities, self._config), force=force)

    def cleanup(self, current_entities: Sequence[EntityDescriptor]) -> list[Path]:
        """Delete generated files that no current entity accounts for.

        Only files carrying a fingerprint header are considered; anything else
        in the output directory is left alone.

        Returns:
            The deleted paths, sorted.
        """
        if not self._output_dir.is_dir():
            return []
        expected = {file_name(e, self._config) for e in current_entities}
        expected.add(INDEX_FILE_NAME)

        removed: list[Path] = []
        for path in sorted(self._output_dir.glob("*" + FILE_SUFFIX)):
            if path.name in expected or not is_generated(path):
                continue
            path.unlink()
            logger.info("Removed stale generated file %s", path)
            removed.append(path)
        return removed

    def _detect_collisions(self, entities: Sequence[EntityDescriptor]) -> None:
        owners: dict[str, str] = {}
        duplicates: list[str] = []
        for entity in entities:
            name = file_name(entity, self._config)
            owner = owners.setdefault(name, entity.identity)
            if owner != entity.identity and name not in duplicates:
                duplicates.append(name)
        if duplicates:
            raise NameCollisionError(duplicates)

    def _write_entity(
        self,
        entity: EntityDescriptor,
        registry: Mapping[str, EntityDescriptor],
        *,
        batch: Collection[str] | None,
        force: bool,
    ) -> Path:
        unit = compile_entity(entity, self._config, registry=registry)
        content = render_entity(unit, self._config, batch=batch)
        return self._sync(self._output_dir / file_name(entity, self._config), content, force=force)

    def _sync(self, path: Path, content: str, *, force: bool) -> Path:
        """Write *content* with its header to *path* unless already current."""
        self._output_dir.mkdir(parents=True, exist_ok=True)
        if not force and read_first_line(path) == fingerprint_header(content):
            logger.debug("Skipping %s: fingerprint unchanged", path)
            return path
        _atomic_write(path, with_header(content))
        logger.info("Wrote %s", path)
        return path


# ################
# Implementation
# ################


def _atomic_write(path: Path, content: str) -> None:
    """Write *content* to a temporary sibling of *path*, then rename it into place."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".typesync-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
