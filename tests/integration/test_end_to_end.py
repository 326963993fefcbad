"""End-to-end integration tests for complete migration runs."""

import shutil
from pathlib import Path

import pytest
import yaml

from chartmigrate import from_file, migrate_document, migrate_file
from chartmigrate.core.exceptions import SchemaValidationError
from chartmigrate.core.pipeline import validate_document
from chartmigrate.models.settings import MigratorSettings

EXAMPLES_DIR = Path(__file__).resolve().parents[2] / "examples" / "redpanda"


@pytest.fixture
def settings_file(temp_dir, schema_dir):
    """Settings YAML pointing at the offline schemas and a disk cache."""
    path = temp_dir / "settings.yaml"
    path.write_text(
        f"schema_dir: \"{schema_dir}\"\ncache_dir: \"{temp_dir / 'cache'}\"\n",
        encoding="utf-8",
    )
    return path


@pytest.mark.integration
class TestEndToEndMigration:
    """End-to-end tests for file-based migrations."""

    def test_example_values_file(self, temp_dir, settings_file):
        """Migrate the bundled legacy example and validate the result."""
        input_path = temp_dir / "values-legacy.yaml"
        shutil.copy(EXAMPLES_DIR / "values-legacy.yaml", input_path)

        result = migrate_file(input_path, settings_file)

        assert result.output_path == temp_dir / "values-legacy-v25.1.1.yaml"
        written = yaml.safe_load(result.output_path.read_text(encoding="utf-8"))
        assert written == result.document.data
        assert "license_key" not in written
        assert written["storage"]["tiered"]["config"]["cloud_storage_region"] == "us-east-1"

        settings = MigratorSettings(schema_dir=str(temp_dir / "schemas"))
        assert validate_document(from_file(result.output_path), settings=settings).ok
        # Schema was stored in the disk cache
        assert list((temp_dir / "cache" / "versions").glob("*.ref"))

    def test_repeated_runs_never_overwrite(self, legacy_file, settings_file):
        first = migrate_file(legacy_file, settings_file)
        original = first.output_path.read_text(encoding="utf-8")
        second = migrate_file(legacy_file, settings_file)
        third = migrate_file(legacy_file, settings_file)

        assert first.output_path.name == "values-v25.1.1.yaml"
        assert second.output_path.name == "values-v25.1.1-1.yaml"
        assert third.output_path.name == "values-v25.1.1-2.yaml"
        assert first.output_path.read_text(encoding="utf-8") == original
        assert second.output_path.read_text(encoding="utf-8") == original

    def test_migrating_output_again_changes_nothing(self, legacy_file, settings_file, settings):
        first = migrate_file(legacy_file, settings_file)
        again = migrate_document(from_file(first.output_path), settings)

        assert again.document == first.document
        assert not again.report.changed

    def test_workload_override_for_untagged_file(self, temp_dir, settings_file):
        input_path = temp_dir / "values.json"
        input_path.write_text(
            '{"image": {"repository": "redpanda"}, "license_key": "abc"}',
            encoding="utf-8",
        )
        result = migrate_file(input_path, settings_file, workload_version="v24.1.1")

        assert result.output_path.suffix == ".json"
        migrated = from_file(result.output_path)
        assert migrated.get("image.tag") == "v24.1.1"
        assert migrated.get("enterprise.license") == "abc"

    def test_invalid_result_is_not_written(self, temp_dir, settings_file):
        input_path = temp_dir / "values.yaml"
        input_path.write_text(
            "image:\n  repository: redpanda\n  tag: v23.2.24\nunknownTopLevel: true\n",
            encoding="utf-8",
        )
        with pytest.raises(SchemaValidationError):
            migrate_file(input_path, settings_file)
        assert not list(temp_dir.glob("values-*.yaml"))
