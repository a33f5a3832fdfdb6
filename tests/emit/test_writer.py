# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for writing declarations to the output directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from typesync.emit.render import FINGERPRINT_PREFIX, compute_fingerprint
from typesync.emit.writer import NameCollisionError, Writer
from typesync.model import (
    ArrayNode,
    Attribute,
    ConfigError,
    ConfigLayer,
    ConfigOverrides,
    EntityRefNode,
    ExportStyle,
    NullStrategy,
    OptionalNode,
    PrimitiveNode,
    entity,
)

# ###############
# Helpers
# ###############

STR = PrimitiveNode(primitive="str")

ADDRESS = entity(
    "app.Address",
    [
        Attribute(name="street", type=STR),
        Attribute(name="city", type=STR),
        Attribute(name="zip", type=OptionalNode(inner=STR)),
    ],
)

USER = entity(
    "app.User",
    [
        Attribute(name="name", type=STR),
        Attribute(name="address", type=EntityRefNode(identity="app.Address")),
        Attribute(name="tags", type=ArrayNode(inner=STR)),
    ],
)


def _writer(tmp_path: Path, **settings) -> Writer:
    return Writer(ConfigLayer(output_dir=tmp_path / "types", **settings))


def _age(path: Path, seconds: float = 100.0) -> float:
    """Push the mtime of *path* into the past and return the new value."""
    stamp = path.stat().st_mtime - seconds
    os.utime(path, (stamp, stamp))
    return path.stat().st_mtime


# ###############
# Single files
# ###############


class TestWrite:
    def test_renders_header_and_declaration(self, tmp_path: Path) -> None:
        path = _writer(tmp_path).write(ADDRESS)
        assert path == tmp_path / "types" / "Address.ts"
        body = (
            "export type Address = {\n"
            "  street: string;\n"
            "  city: string;\n"
            "  zip: string | null;\n"
            "}\n"
        )
        assert path.read_text() == f"{FINGERPRINT_PREFIX} {compute_fingerprint(body)}\n\n{body}"

    def test_header_has_32_hex_digits(self, tmp_path: Path) -> None:
        header = _writer(tmp_path).write(ADDRESS).read_text().splitlines()[0]
        digest = header.removeprefix(FINGERPRINT_PREFIX + " ")
        assert len(digest) == 32
        int(digest, 16)

    def test_optional_strategy(self, tmp_path: Path) -> None:
        path = _writer(tmp_path, null_strategy=NullStrategy.OPTIONAL).write(ADDRESS)
        assert "  zip?: string;\n" in path.read_text()

    def test_creates_output_directory(self, tmp_path: Path) -> None:
        writer = Writer(ConfigLayer(), tmp_path / "deep" / "nested")
        assert writer.write(ADDRESS).parent.is_dir()

    def test_standalone_write_imports_every_dependency(self, tmp_path: Path) -> None:
        writer = Writer(ConfigLayer(output_dir=tmp_path), registry={e.identity: e for e in [USER, ADDRESS]})
        text = writer.write(USER).read_text()
        assert "import type { Address } from './Address'\n\nexport type User = {" in text

    def test_standalone_write_without_registry_warns(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="typesync.compiler.entity_compiler"):
            text = _writer(tmp_path).write(USER).read_text()
        assert "  address: unknown;\n" in text
        assert "import" not in text
        assert "Unresolved entity reference 'app.Address'" in caplog.text

    def test_unchanged_file_is_not_rewritten(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        path = writer.write(ADDRESS)
        mtime = _age(path)
        writer.write(ADDRESS)
        assert path.stat().st_mtime == mtime

    def test_force_rewrites(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        path = writer.write(ADDRESS)
        mtime = _age(path)
        writer.write(ADDRESS, force=True)
        assert path.stat().st_mtime != mtime

    def test_changed_content_is_rewritten(self, tmp_path: Path) -> None:
        path = _writer(tmp_path).write(ADDRESS)
        _writer(tmp_path, null_strategy=NullStrategy.OPTIONAL).write(ADDRESS)
        assert "zip?: string;" in path.read_text()

    def test_hand_edited_body_with_matching_header_is_kept(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        path = writer.write(ADDRESS)
        header = path.read_text().splitlines()[0]
        path.write_text(f"{header}\n\n// edited\n")
        writer.write(ADDRESS)
        assert path.read_text().endswith("// edited\n")

    def test_no_temporary_files_left_behind(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        writer.write(ADDRESS)
        writer.write(ADDRESS, force=True)
        assert sorted(p.name for p in writer.output_dir.iterdir()) == ["Address.ts"]

    def test_failed_rename_keeps_previous_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        writer = _writer(tmp_path)
        path = writer.write(ADDRESS)
        before = path.read_text()

        def _fail(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", _fail)
        with pytest.raises(OSError, match="disk full"):
            writer.write(ADDRESS, force=True)
        assert path.read_text() == before
        assert sorted(p.name for p in writer.output_dir.iterdir()) == ["Address.ts"]

    def test_requires_output_directory(self) -> None:
        with pytest.raises(ConfigError):
            Writer(ConfigLayer())


# ###############
# Batches
# ###############


class TestWriteAll:
    def test_writes_files_and_index(self, tmp_path: Path) -> None:
        result = _writer(tmp_path).write_all([ADDRESS, USER])
        assert [p.name for p in result.files] == ["Address.ts", "User.ts"]
        assert result.index.name == "index.ts"

    def test_user_imports_address(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        writer.write_all([ADDRESS, USER])
        text = (writer.output_dir / "User.ts").read_text()
        assert text.splitlines()[2] == "import type { Address } from './Address'"
        assert "  address: Address;\n" in text
        assert "  tags: string[];\n" in text

    def test_dependencies_outside_batch_are_not_imported(self, tmp_path: Path) -> None:
        writer = Writer(ConfigLayer(output_dir=tmp_path), registry={e.identity: e for e in [USER, ADDRESS]})
        writer.write_all([USER])
        text = (tmp_path / "User.ts").read_text()
        assert "import" not in text
        assert "  address: Address;\n" in text

    def test_imports_are_sorted_by_type_name(self, tmp_path: Path) -> None:
        zeta = entity("app.Zeta")
        alpha = entity("app.Alpha")
        holder = entity(
            "app.Holder",
            [
                Attribute(name="z", type=EntityRefNode(identity="app.Zeta")),
                Attribute(name="a", type=EntityRefNode(identity="app.Alpha")),
            ],
        )
        writer = _writer(tmp_path)
        writer.write_all([zeta, alpha, holder])
        lines = (writer.output_dir / "Holder.ts").read_text().splitlines()
        assert lines[2:4] == [
            "import type { Alpha } from './Alpha'",
            "import type { Zeta } from './Zeta'",
        ]

    def test_index_reexports_sorted(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        writer.write_all([USER, ADDRESS])
        lines = (writer.output_dir / "index.ts").read_text().splitlines()
        assert lines[0].startswith(FINGERPRINT_PREFIX)
        assert lines[1:] == [
            "",
            "export type { Address } from './Address'",
            "export type { User } from './User'",
        ]

    def test_default_export_style(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path, export_style=ExportStyle.DEFAULT)
        writer.write_all([ADDRESS, USER])
        user = (writer.output_dir / "User.ts").read_text()
        assert "import Address from './Address'\n" in user
        assert user.endswith("}\nexport default User\n")
        index = (writer.output_dir / "index.ts").read_text()
        assert "export { default as Address } from './Address'\n" in index

    def test_import_follows_dependency_export_style(self, tmp_path: Path) -> None:
        address = ADDRESS.model_copy(update={"config": ConfigOverrides(export_style=ExportStyle.DEFAULT)})
        writer = _writer(tmp_path)
        writer.write_all([address, USER])
        assert "import Address from './Address'\n" in (writer.output_dir / "User.ts").read_text()

    def test_name_collision_fails_before_writing(self, tmp_path: Path) -> None:
        first = entity("billing.User")
        second = entity("auth.User")
        writer = _writer(tmp_path)
        with pytest.raises(NameCollisionError, match="User.ts"):
            writer.write_all([ADDRESS, first, second])
        assert not writer.output_dir.exists()

    def test_same_identity_twice_is_not_a_collision(self, tmp_path: Path) -> None:
        result = _writer(tmp_path).write_all([ADDRESS, ADDRESS])
        assert [p.name for p in result.files] == ["Address.ts", "Address.ts"]

    def test_rerun_leaves_files_untouched(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        result = writer.write_all([ADDRESS, USER])
        mtimes = {p: _age(p) for p in [*result.files, result.index]}
        writer.write_all([ADDRESS, USER])
        assert {p: p.stat().st_mtime for p in mtimes} == mtimes

    def test_empty_batch_writes_empty_index(self, tmp_path: Path) -> None:
        result = _writer(tmp_path).write_all([])
        assert result.files == []
        assert result.index.read_text() == f"{FINGERPRINT_PREFIX} {compute_fingerprint('')}\n\n"


# ###############
# Cleanup
# ###############


class TestCleanup:
    def test_removes_stale_generated_files(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        writer.write_all([ADDRESS, USER])
        removed = writer.cleanup([ADDRESS])
        assert removed == [writer.output_dir / "User.ts"]
        assert sorted(p.name for p in writer.output_dir.iterdir()) == ["Address.ts", "index.ts"]

    def test_keeps_files_without_header(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        writer.write_all([ADDRESS])
        manual = writer.output_dir / "Manual.ts"
        manual.write_text("export type Manual = string\n")
        assert writer.cleanup([]) == [writer.output_dir / "Address.ts"]
        assert manual.exists()
        assert (writer.output_dir / "index.ts").exists()

    def test_keeps_non_utf8_handwritten_file(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        writer.write_all([ADDRESS, USER])
        legacy = writer.output_dir / "legacy.ts"
        legacy.write_bytes(b"// caf\xe9 helper\n")
        assert writer.cleanup([ADDRESS]) == [writer.output_dir / "User.ts"]
        assert legacy.read_bytes() == b"// caf\xe9 helper\n"

    def test_keeps_other_extensions(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        writer.write_all([ADDRESS])
        notes = writer.output_dir / "notes.md"
        notes.write_text(f"{FINGERPRINT_PREFIX} 0\n")
        writer.cleanup([])
        assert notes.exists()

    def test_empty_file_is_not_generated(self, tmp_path: Path) -> None:
        writer = _writer(tmp_path)
        writer.output_dir.mkdir()
        empty = writer.output_dir / "Empty.ts"
        empty.write_text("")
        assert writer.cleanup([]) == []
        assert empty.exists()

    def test_missing_directory_is_a_no_op(self, tmp_path: Path) -> None:
        assert _writer(tmp_path).cleanup([ADDRESS]) == []
