# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler pipeline: type nodes, entities and dependency ordering."""

from typesync.compiler.entity_compiler import CompiledUnit, compile_entity
from typesync.compiler.graph import build_dependency_graph, sort_entities, topological_sort
from typesync.compiler.naming import format_property_name, resolve_type_name
from typesync.compiler.type_compiler import TypeCompiler, UnsupportedTypeError, normalize_union

__all__ = [
    "TypeCompiler",
    "UnsupportedTypeError",
    "normalize_union",
    "compile_entity",
    "CompiledUnit",
    "build_dependency_graph",
    "topological_sort",
    "sort_entities",
    "resolve_type_name",
    "format_property_name",
]
