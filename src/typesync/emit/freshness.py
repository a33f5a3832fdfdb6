# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Drift detection between the output directory and freshly rendered content.

The checker renders the batch in memory exactly as :class:`~typesync.emit.writer.Writer`
would and compares it with the files on disk. It only ever reads.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from typesync.compiler.graph import sort_entities
from typesync.emit.render import FILE_SUFFIX, is_generated, render_batch, strip_header
from typesync.model.config import ConfigError, ConfigLayer
from typesync.model.entities import EntityDescriptor

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class FreshnessResult:
    """Outcome of a freshness check.

    Attributes:
        fresh: True if the output directory matches the rendered batch.
        discrepancies: ``Missing: <name>``, ``Extra: <name>`` and
            ``Out of date: <name>`` entries, ordered by file name.
    """

    fresh: bool
    discrepancies: list[str] = field(default_factory=list)


def check_freshness(
    entities: Sequence[EntityDescriptor],
    config: ConfigLayer,
    output_dir: Path | None = None,
    *,
    registry: Mapping[str, EntityDescriptor] | None = None,
) -> FreshnessResult:
    """Compare the output directory with what generating *entities* would produce.

    Args:
        entities: The batch that would be generated.
        config: Global configuration.
        output_dir: Directory to inspect; defaults to ``config.output_dir``.
        registry: Entities available for reference resolution, by identity.

    Returns:
        A :class:`FreshnessResult`.

    Raises:
        ConfigError: If no output directory is configured.
    """
    directory = output_dir if output_dir is not None else config.output_dir
    if directory is None:
        raise ConfigError("No output directory configured")
    directory = Path(directory)

    current = _current_files(directory)
    if not entities and not any(is_generated(directory / name) for name in current):
        return FreshnessResult(fresh=True)

    expected = render_batch(sort_entities(entities, config, registry=registry), config, registry=registry)

    discrepancies: list[str] = []
    for name in sorted(set(current) | set(expected)):
        path = directory / name
        if name not in current:
            discrepancies.append(f"Missing: {name}")
        elif name not in expected:
            if is_generated(path):
                discrepancies.append(f"Extra: {name}")
        elif strip_header(path.read_text(encoding="utf-8", errors="replace")) != strip_header(expected[name]):
            discrepancies.append(f"Out of date: {name}")

    return FreshnessResult(fresh=not discrepancies, discrepancies=discrepancies)


# ################
# Implementation
# ################


def _current_files(directory: Path) -> list[str]:
    if not directory.is_dir():
        return []
    return sorted(p.name for p in directory.glob("*" + FILE_SUFFIX) if p.is_file())
