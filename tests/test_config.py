"""Tests for vault discovery and settings persistence."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from smartexport import config
from smartexport.config import (
    ConfigurationError,
    _discover_vault,
    clamp_depths,
    get_vault_root,
    load_settings,
    save_settings,
    settings_path,
)
from smartexport.models import ExportSettings

# ─────────────────────────────────────────────────────────────────────────────
# Vault Discovery
# ─────────────────────────────────────────────────────────────────────────────


class TestGetVaultRoot:
    """Tests for get_vault_root."""

    def test_explicit_path_wins(self, tmp_vault: Path, tmp_path: Path):
        other = tmp_path / "other"
        other.mkdir()

        assert get_vault_root(other) == other
        assert get_vault_root(str(other)) == other

    def test_explicit_path_must_exist(self, tmp_vault: Path, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="does not exist"):
            get_vault_root(tmp_path / "nope")

    def test_environment_variable(self, tmp_vault: Path):
        assert get_vault_root() == tmp_vault

    def test_environment_variable_must_exist(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("SMARTEXPORT_VAULT_ROOT", str(tmp_path / "gone"))

        with pytest.raises(ConfigurationError, match="SMARTEXPORT_VAULT_ROOT"):
            get_vault_root()

    def test_discovers_from_cwd(self, tmp_vault: Path, monkeypatch: pytest.MonkeyPatch):
        subdir = tmp_vault / "projects" / "alpha"
        subdir.mkdir(parents=True)
        monkeypatch.delenv("SMARTEXPORT_VAULT_ROOT")
        monkeypatch.chdir(subdir)

        assert get_vault_root() == tmp_vault.resolve()

    def test_settings_file_marks_vault(self, tmp_path: Path):
        vault = tmp_path / "plain"
        (vault / "deep").mkdir(parents=True)
        (vault / ".smartexport.yaml").write_text("{}\n")

        assert _discover_vault(vault / "deep") == vault.resolve()

    def test_discovery_gives_up(self, tmp_path: Path):
        empty = tmp_path / "empty"
        empty.mkdir()

        assert _discover_vault(empty, max_depth=1) is None

    def test_no_vault_found(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("SMARTEXPORT_VAULT_ROOT", raising=False)
        monkeypatch.setattr(config, "_discover_vault", lambda: None)

        with pytest.raises(ConfigurationError, match="No vault found"):
            get_vault_root()


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────


class TestSettings:
    """Tests for load_settings, save_settings and ExportSettings."""

    def test_defaults_without_file(self, tmp_vault: Path):
        settings = load_settings(tmp_vault)

        assert settings == ExportSettings()
        assert settings.default_content_depth == 3
        assert settings.default_title_depth == 6
        assert settings.default_export_format == "xml"

    def test_save_and_load(self, tmp_vault: Path):
        saved = ExportSettings(
            default_content_depth=2,
            default_title_depth=9,
            default_export_format="llm-markdown",
        )

        path = save_settings(tmp_vault, saved)

        assert path == settings_path(tmp_vault) == tmp_vault / ".smartexport.yaml"
        assert yaml.safe_load(path.read_text())["default_title_depth"] == 9
        assert load_settings(tmp_vault) == saved

    def test_partial_file_fills_defaults(self, tmp_vault: Path):
        settings_path(tmp_vault).write_text("default_export_format: print-friendly-markdown\n")

        settings = load_settings(tmp_vault)

        assert settings.default_export_format == "print-friendly-markdown"
        assert settings.default_content_depth == 3

    @pytest.mark.parametrize(
        "text",
        [
            "default_content_depth: [unclosed\n",
            "- just\n- a list\n",
            "default_content_depth: 99\n",
            "default_export_format: pdf\n",
        ],
    )
    def test_bad_file_yields_defaults(self, tmp_vault: Path, text: str):
        settings_path(tmp_vault).write_text(text)

        assert load_settings(tmp_vault) == ExportSettings()

    def test_empty_file_yields_defaults(self, tmp_vault: Path):
        settings_path(tmp_vault).write_text("")

        assert load_settings(tmp_vault) == ExportSettings()

    def test_title_depth_raised_to_content_depth(self):
        settings = ExportSettings(default_content_depth=7, default_title_depth=4)

        assert settings.default_title_depth == 7

    @pytest.mark.parametrize(
        "fields",
        [
            {"default_content_depth": 0},
            {"default_content_depth": 21},
            {"default_title_depth": 31},
            {"default_export_format": "html"},
        ],
    )
    def test_out_of_range(self, fields: dict):
        with pytest.raises(ValidationError):
            ExportSettings(**fields)


class TestClampDepths:
    """Tests for clamp_depths."""

    @pytest.mark.parametrize(
        ("content", "title", "prefer", "expected"),
        [
            (2, 5, "content", (2, 5)),
            (3, 3, "title", (3, 3)),
            (6, 4, "content", (6, 6)),
            (6, 4, "title", (4, 4)),
        ],
    )
    def test_clamp(self, content, title, prefer, expected):
        assert clamp_depths(content, title, prefer=prefer) == expected
