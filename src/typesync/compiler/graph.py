# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Dependency graph and topological ordering of an entity batch."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum

from typesync.compiler.entity_compiler import compile_entity
from typesync.model.config import ConfigLayer
from typesync.model.entities import EntityDescriptor

# ###############
# Public Interface
# ###############


def build_dependency_graph(
    entities: Sequence[EntityDescriptor],
    config: ConfigLayer,
    *,
    registry: Mapping[str, EntityDescriptor] | None = None,
) -> dict[str, list[str]]:
    """Compile every entity and collect its in-batch dependencies.

    Args:
        entities: The batch.
        config: Global configuration.
        registry: Entities from outside the batch available for reference
            resolution. Batch members always resolve.

    Returns:
        Identity of each entity mapped to the identities of the batch members
        it depends on. Dependencies outside the batch are dropped.
    """
    registry = batch_registry(entities, registry)
    in_batch = {e.identity for e in entities}
    graph: dict[str, list[str]] = {}
    for entity in entities:
        unit = compile_entity(entity, config, registry=registry)
        graph[entity.identity] = [dep.identity for dep in unit.dependencies if dep.identity in in_batch]
    return graph


def topological_sort(
    entities: Sequence[EntityDescriptor],
    graph: Mapping[str, Sequence[str]],
) -> list[EntityDescriptor]:
    """Order *entities* so that dependencies precede their dependents.

    Depth-first traversal with an explicit stack and three states per node.
    Roots are visited in input order; a dependency that is still in progress
    closes a cycle and is skipped. Every entity appears exactly once.
    """
    by_identity = registry_of(entities)
    state: dict[str, _State] = {}
    ordered: list[EntityDescriptor] = []

    for root in entities:
        if state.get(root.identity) is not None:
            continue
        state[root.identity] = _State.IN_PROGRESS
        stack: list[tuple[str, list[str]]] = [(root.identity, list(graph.get(root.identity, ())))]
        while stack:
            identity, pending = stack[-1]
            while pending:
                dep = pending.pop(0)
                if dep in by_identity and state.get(dep) is None:
                    state[dep] = _State.IN_PROGRESS
                    stack.append((dep, list(graph.get(dep, ()))))
                    break
            else:
                stack.pop()
                state[identity] = _State.DONE
                ordered.append(by_identity[identity])
    return ordered


def sort_entities(
    entities: Sequence[EntityDescriptor],
    config: ConfigLayer,
    *,
    registry: Mapping[str, EntityDescriptor] | None = None,
) -> list[EntityDescriptor]:
    """Compile the batch and return it in dependency order."""
    return topological_sort(entities, build_dependency_graph(entities, config, registry=registry))


def registry_of(entities: Sequence[EntityDescriptor]) -> dict[str, EntityDescriptor]:
    """Index *entities* by identity, keeping the first of any duplicates."""
    registry: dict[str, EntityDescriptor] = {}
    for entity in entities:
        registry.setdefault(entity.identity, entity)
    return registry


def batch_registry(
    entities: Sequence[EntityDescriptor],
    registry: Mapping[str, EntityDescriptor] | None = None,
) -> Mapping[str, EntityDescriptor]:
    """Return the registry that resolves references within a batch.

    Batch members always resolve; *registry* adds entities from outside the
    batch and wins for identities present in both.
    """
    if registry is None:
        return registry_of(entities)
    return {**registry_of(entities), **registry}


# ################
# Implementation
# ################


class _State(Enum):
    IN_PROGRESS = 1
    DONE = 2
