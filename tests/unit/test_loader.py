"""Tests for document and settings loading."""

import json
from pathlib import Path

import pytest

from chartmigrate.core.exceptions import ConfigError, InputParseError
from chartmigrate.models.loader import apply_overrides, load_document, load_settings
from chartmigrate.models.settings import MigratorSettings

EXAMPLES_DIR = Path(__file__).resolve().parents[2] / "examples" / "redpanda"


class TestLoadDocument:
    """Tests for load_document."""

    def test_load_yaml(self, legacy_file, legacy_values):
        document = load_document(legacy_file)
        assert document.data == legacy_values
        assert document.top_level_keys()[0] == "_comment"

    def test_load_json(self, temp_dir):
        path = temp_dir / "values.json"
        path.write_text(json.dumps({"image": {"tag": "v23.2.24"}}), encoding="utf-8")
        assert load_document(path).get("image.tag") == "v23.2.24"

    def test_missing_file(self, temp_dir):
        with pytest.raises(InputParseError, match="not found"):
            load_document(temp_dir / "nope.yaml")

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "values.yaml"
        path.write_text("image: [unclosed\n", encoding="utf-8")
        with pytest.raises(InputParseError, match="Invalid YAML"):
            load_document(path)

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "values.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(InputParseError, match="Invalid JSON"):
            load_document(path)

    @pytest.mark.parametrize("content", ["- a\n- b\n", "just text\n", ""])
    def test_top_level_must_be_mapping(self, temp_dir, content):
        path = temp_dir / "values.yaml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(InputParseError, match="mapping"):
            load_document(path)


class TestLoadSettings:
    """Tests for load_settings and apply_overrides."""

    def test_defaults_without_file(self):
        assert load_settings() == MigratorSettings()

    def test_empty_file(self, temp_dir):
        path = temp_dir / "settings.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == MigratorSettings()

    def test_load_with_templates(self, temp_dir, monkeypatch):
        monkeypatch.setenv("CHART_CACHE", "/var/cache/charts")
        path = temp_dir / "settings.yaml"
        path.write_text(
            "cache_dir: \"{{ env_var('CHART_CACHE') }}\"\nmax_attempts: 5\nparallel: false\n",
            encoding="utf-8",
        )
        settings = load_settings(path)
        assert settings.cache_dir == "/var/cache/charts"
        assert settings.max_attempts == 5
        assert settings.parallel is False

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(temp_dir / "settings.yaml")

    def test_not_a_mapping(self, temp_dir):
        path = temp_dir / "settings.yaml"
        path.write_text("- timeout\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="dictionary"):
            load_settings(path)

    def test_unknown_key(self, temp_dir):
        path = temp_dir / "settings.yaml"
        path.write_text("retries_please: 3\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="validation failed"):
            load_settings(path)

    def test_example_settings_file(self, monkeypatch):
        monkeypatch.setenv("HOME", "/home/ops")
        settings = load_settings(EXAMPLES_DIR / "settings.yaml")
        assert settings.cache_dir == "/home/ops/.cache/chartmigrate"
        assert settings.allow_stale_schema is True

    def test_apply_overrides(self):
        settings = MigratorSettings(timeout=10)
        updated = apply_overrides(settings, timeout=None, schema_dir="/schemas")
        assert updated.timeout == 10
        assert updated.schema_dir == "/schemas"
        assert apply_overrides(settings) is settings

    def test_invalid_override(self):
        with pytest.raises(ConfigError, match="Invalid setting override"):
            apply_overrides(MigratorSettings(), timeout=0)
