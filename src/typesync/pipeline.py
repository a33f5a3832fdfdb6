# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""The generate, clean and check operations offered to front-ends."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping, Sequence
from pathlib import Path

from typesync.compiler.graph import sort_entities
from typesync.emit.freshness import FreshnessResult, check_freshness
from typesync.emit.writer import WriteResult, Writer
from typesync.model.config import ConfigLayer
from typesync.model.entities import EntityDescriptor

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def generate(
    entities: Sequence[EntityDescriptor],
    config: ConfigLayer,
    *,
    force: bool = False,
    registry: Mapping[str, EntityDescriptor] | None = None,
) -> WriteResult:
    """Sort *entities*, write them with the index file, then remove stale files.

    Raises:
        ConfigError: If no output directory is configured.
        NameCollisionError: If two entities resolve to the same file name.
        UnsupportedTypeError: In strict mode, for an unsupported type.
    """
    ordered = sort_entities(entities, config, registry=registry)
    writer = Writer(config, registry=registry)
    result = writer.write_all(ordered, force=force)
    removed = writer.cleanup(ordered)
    logger.info("Generated %d file(s) in %s, removed %d", len(result.files), writer.output_dir, len(removed))
    return result


def clean(output_dir: Path) -> bool:
    """Remove *output_dir* entirely. Returns False if it did not exist."""
    if not output_dir.is_dir():
        return False
    shutil.rmtree(output_dir)
    logger.info("Removed %s", output_dir)
    return True


def check(
    entities: Sequence[EntityDescriptor],
    config: ConfigLayer,
    *,
    registry: Mapping[str, EntityDescriptor] | None = None,
) -> FreshnessResult:
    """Report whether the output directory is up to date with *entities*."""
    return check_freshness(entities, config, registry=registry)
