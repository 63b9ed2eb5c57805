"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

from pathlib import Path

import pytest
from rich.theme import Theme

from gpureset.core.theme import ThemeColors, get_rich_theme, load_theme


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.header == "#69B9A1"
        assert colors.foreign == "#f53263"

    def test_valid_short_hex(self) -> None:
        """ThemeColors accepts #RGB codes."""
        assert ThemeColors(muted="#abc").muted == "#abc"

    def test_invalid_hex_no_hash(self) -> None:
        """ThemeColors rejects colors without # prefix."""
        with pytest.raises(ValueError, match="must start with '#'"):
            ThemeColors(text="ffffff")

    def test_invalid_hex_wrong_length(self) -> None:
        """ThemeColors rejects colors with wrong length."""
        with pytest.raises(ValueError, match="must be #RGB or #RRGGBB"):
            ThemeColors(text="#ff")

    def test_invalid_hex_chars(self) -> None:
        """ThemeColors rejects invalid hex characters."""
        with pytest.raises(ValueError, match="invalid hex color"):
            ThemeColors(text="#gggggg")

    def test_extra_fields_forbidden(self) -> None:
        """ThemeColors rejects unknown fields."""
        with pytest.raises(ValueError):
            ThemeColors(unknown_field="#ffffff")  # type: ignore[call-arg]


class TestLoadTheme:
    """Tests for load_theme function."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """No override file means default colors."""
        assert load_theme(tmp_path / "missing.toml") == ThemeColors()

    def test_applies_overrides(self, tmp_path: Path) -> None:
        """Colors from the [colors] table replace defaults."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\nforeign = "#ff0000"\n')

        colors = load_theme(theme_file)

        assert colors.foreign == "#ff0000"
        assert colors.stock == ThemeColors().stock

    def test_invalid_toml_gives_defaults(self, tmp_path: Path) -> None:
        """Broken TOML falls back to defaults."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text("[colors\n")

        assert load_theme(theme_file) == ThemeColors()

    def test_invalid_color_gives_defaults(self, tmp_path: Path) -> None:
        """An invalid color falls back to defaults."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\ntext = "red"\n')

        assert load_theme(theme_file) == ThemeColors()


class TestGetRichTheme:
    """Tests for get_rich_theme function."""

    def test_defines_semantic_styles(self) -> None:
        """The Rich theme carries the styles the CLI uses."""
        theme = get_rich_theme(ThemeColors())

        assert isinstance(theme, Theme)
        for name in ("success", "error", "foreign", "stock", "destructive", "bold_header", "step"):
            assert name in theme.styles
