# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for drift detection against the output directory."""

from pathlib import Path

import pytest

from typesync.emit.freshness import check_freshness
from typesync.emit.render import FINGERPRINT_PREFIX
from typesync.emit.writer import Writer
from typesync.model import Attribute, ConfigError, ConfigLayer, EntityRefNode, NullStrategy, PrimitiveNode, entity

# ###############
# Helpers
# ###############

STR = PrimitiveNode(primitive="str")
ADDRESS = entity("app.Address", [Attribute(name="street", type=STR)])
USER = entity("app.User", [Attribute(name="address", type=EntityRefNode(identity="app.Address"))])


def _config(tmp_path: Path, **settings) -> ConfigLayer:
    return ConfigLayer(output_dir=tmp_path / "types", **settings)


def _snapshot(directory: Path) -> dict[str, tuple[str, float]]:
    return {p.name: (p.read_text(), p.stat().st_mtime) for p in directory.iterdir()}


# ###############
# Tests
# ###############


class TestCheckFreshness:
    def test_fresh_after_write(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        Writer(config).write_all([ADDRESS, USER])
        result = check_freshness([USER, ADDRESS], config)
        assert result.fresh
        assert result.discrepancies == []

    def test_missing_directory_reports_every_file(self, tmp_path: Path) -> None:
        result = check_freshness([ADDRESS, USER], _config(tmp_path))
        assert not result.fresh
        assert result.discrepancies == ["Missing: Address.ts", "Missing: User.ts", "Missing: index.ts"]

    def test_empty_batch_without_files_is_fresh(self, tmp_path: Path) -> None:
        assert check_freshness([], _config(tmp_path)).fresh

    def test_empty_batch_ignores_handwritten_files(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        config.output_dir.mkdir()
        (config.output_dir / "Manual.ts").write_text("export type Manual = string\n")
        assert check_freshness([], config).fresh

    def test_strategy_without_effect_stays_fresh(self, tmp_path: Path) -> None:
        address = entity("app.Address", [Attribute(name="zip", type=STR, required=False)])
        Writer(_config(tmp_path)).write_all([address])
        assert check_freshness([address], _config(tmp_path, null_strategy=NullStrategy.OPTIONAL)).fresh

    def test_out_of_date_after_attribute_change(self, tmp_path: Path) -> None:
        address = entity("app.Address", [Attribute(name="zip", type=STR, required=False)])
        Writer(_config(tmp_path)).write_all([address])
        changed = entity("app.Address", [Attribute(name="zip", type=STR)])
        result = check_freshness([changed], _config(tmp_path))
        assert result.discrepancies == ["Out of date: Address.ts"]

    def test_extra_generated_file(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        Writer(config).write_all([ADDRESS, USER])
        result = check_freshness([ADDRESS], config)
        assert result.discrepancies == ["Extra: User.ts", "Out of date: index.ts"]

    def test_handwritten_extra_file_is_ignored(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        Writer(config).write_all([ADDRESS])
        (config.output_dir / "Manual.ts").write_text("export type Manual = string\n")
        assert check_freshness([ADDRESS], config).fresh

    def test_non_utf8_handwritten_file_is_ignored(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        Writer(config).write_all([ADDRESS])
        (config.output_dir / "legacy.ts").write_bytes(b"// caf\xe9 helper\n")
        assert check_freshness([ADDRESS], config).fresh

    def test_non_utf8_file_with_expected_name_is_out_of_date(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        Writer(config).write_all([ADDRESS])
        (config.output_dir / "Address.ts").write_bytes(b"// caf\xe9 helper\n")
        assert check_freshness([ADDRESS], config).discrepancies == ["Out of date: Address.ts"]

    def test_edited_body_is_out_of_date_even_with_valid_header(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        Writer(config).write_all([ADDRESS])
        path = config.output_dir / "Address.ts"
        header = path.read_text().splitlines()[0]
        path.write_text(f"{header}\n\n// edited\n")
        assert check_freshness([ADDRESS], config).discrepancies == ["Out of date: Address.ts"]

    def test_stale_header_with_current_body_is_fresh(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        Writer(config).write_all([ADDRESS])
        path = config.output_dir / "Address.ts"
        body = path.read_text().split("\n", 2)[2]
        path.write_text(f"{FINGERPRINT_PREFIX} 0\n\n{body}")
        assert check_freshness([ADDRESS], config).fresh

    def test_never_writes(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        Writer(config).write_all([ADDRESS])
        before = _snapshot(config.output_dir)
        check_freshness([ADDRESS, USER], config)
        assert _snapshot(config.output_dir) == before

    def test_partial_registry_round_trip(self, tmp_path: Path) -> None:
        """A registry that lacks batch members resolves them the same way when writing and checking."""
        external = entity("lib.Country", [Attribute(name="code", type=STR)])
        user = entity(
            "app.User",
            [
                Attribute(name="address", type=EntityRefNode(identity="app.Address")),
                Attribute(name="country", type=EntityRefNode(identity="lib.Country")),
            ],
        )
        registry = {external.identity: external}
        config = _config(tmp_path)
        Writer(config, registry=registry).write_all([ADDRESS, user])
        text = (config.output_dir / "User.ts").read_text()
        assert "  address: Address;\n" in text
        assert "  country: Country;\n" in text
        assert check_freshness([user, ADDRESS], config, registry=registry).fresh

    def test_output_dir_argument_overrides_config(self, tmp_path: Path) -> None:
        Writer(ConfigLayer(), tmp_path / "other").write_all([ADDRESS])
        assert check_freshness([ADDRESS], ConfigLayer(), tmp_path / "other").fresh

    def test_requires_output_directory(self) -> None:
        with pytest.raises(ConfigError):
            check_freshness([ADDRESS], ConfigLayer())
