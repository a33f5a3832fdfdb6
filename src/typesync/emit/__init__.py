# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Output synchronization: rendering, writing and freshness checking."""

from typesync.emit.freshness import FreshnessResult, check_freshness
from typesync.emit.render import FINGERPRINT_PREFIX, INDEX_FILE_NAME, compute_fingerprint, render_batch
from typesync.emit.writer import NameCollisionError, WriteResult, Writer

__all__ = [
    "FINGERPRINT_PREFIX",
    "INDEX_FILE_NAME",
    "FreshnessResult",
    "NameCollisionError",
    "WriteResult",
    "Writer",
    "check_freshness",
    "compute_fingerprint",
    "render_batch",
]
