# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Configuration and schema files of a typesync workspace."""

from typesync.workspace.config import (
    CONFIG_FILE_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    load_workspace_config,
    parse_overrides,
)
from typesync.workspace.schema_file import SchemaFileError, load_schema_files, parse_type_expression

__all__ = [
    "CONFIG_FILE_NAME",
    "SchemaFileError",
    "WorkspaceConfig",
    "WorkspaceConfigError",
    "load_schema_files",
    "load_workspace_config",
    "parse_overrides",
    "parse_type_expression",
]
