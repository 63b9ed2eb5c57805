"""Tests for the rules command."""

import tomllib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from gpureset.cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_system_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Ignore any config file on the machine running the tests."""
    monkeypatch.setenv("GPURESET_CONFIG", str(tmp_path / "absent.toml"))


class TestRulesCommand:
    """Tests for gpureset rules."""

    def test_show_rules(self) -> None:
        """The rule table lists every rule list."""
        result = runner.invoke(app, ["rules"])

        assert result.exit_code == 0
        assert "Classification Rules" in result.output
        assert "vulkan_icd_allow" in result.output

    def test_write_rules(self, tmp_path: Path) -> None:
        """--write exports a loadable TOML fragment."""
        path = tmp_path / "rules.toml"

        result = runner.invoke(app, ["rules", "--scope", "userland", "--write", str(path)])

        assert result.exit_code == 0
        assert "Rules written to" in result.output
        data = tomllib.loads(path.read_text())
        userland = data["rules"]["userland"]
        assert "llvm-toolchain" in userland["source_keywords"]
        assert "module_patterns" not in userland

    def test_config_overrides_shown(self, tmp_path: Path) -> None:
        """Overrides from the config file are part of the effective rules."""
        config = tmp_path / "config.toml"
        config.write_text('[rules.full]\nvulkan_icd_allow = ["radv", "lvp"]\n')
        path = tmp_path / "rules.toml"

        result = runner.invoke(app, ["rules", "-c", str(config), "-w", str(path)])

        assert result.exit_code == 0
        assert tomllib.loads(path.read_text())["rules"]["full"]["vulkan_icd_allow"] == [
            "radv",
            "lvp",
        ]

    def test_write_failure(self, tmp_path: Path) -> None:
        """An unwritable destination exits 1."""
        blocker = tmp_path / "file.txt"
        blocker.write_text("x")

        result = runner.invoke(app, ["rules", "--write", str(blocker / "rules.toml")])

        assert result.exit_code == 1
        assert "Failed to write rules" in result.output
