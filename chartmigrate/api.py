"""Public Python API for chartmigrate package.

This module provides the main entry points for migrating values files.
"""

from pathlib import Path

from chartmigrate.core.document import ConfigDocument
from chartmigrate.core.pipeline import MigrationResult, execute
from chartmigrate.models.loader import load_document, load_settings
from chartmigrate.models.settings import MigratorSettings


def from_file(path: str | Path) -> ConfigDocument:
    """Load a values document from a YAML or JSON file.

    Args:
        path: Path to the values file

    Returns:
        Parsed ConfigDocument

    Raises:
        InputParseError: If the file is missing, unparsable or not a mapping

    Example:
        >>> doc = from_file("examples/redpanda/values-legacy.yaml")
        >>> doc.get("image.tag")
        'v23.2.24'
    """
    return load_document(path)


def migrate_document(
    document: ConfigDocument,
    settings: MigratorSettings | None = None,
    **versions: str | None,
) -> MigrationResult:
    """Migrate an in-memory document without writing anything.

    Args:
        document: Parsed values document
        settings: Run settings (defaults when None)
        **versions: Any of workload_version, console_version,
            source_version, target_version

    Returns:
        MigrationResult holding the migrated document and its reports

    Raises:
        MigratorError: Any subclass, see ``chartmigrate.core.pipeline.execute``
    """
    return execute(document, settings, dry_run=True, **versions)


def migrate_file(
    input_path: str | Path,
    settings_path: str | Path | None = None,
    dry_run: bool = False,
    **versions: str | None,
) -> MigrationResult:
    """Load, migrate, validate and write a values file.

    Convenience function that combines `from_file()`, `load_settings()` and
    the migration pipeline. The migrated file is written next to the input
    (or into ``output_dir`` from the settings) under a name that never
    overwrites an existing file.

    Args:
        input_path: Path to the legacy values file
        settings_path: Optional settings YAML file
        dry_run: Migrate and validate but do not write
        **versions: Any of workload_version, console_version,
            source_version, target_version

    Raises:
        MigratorError: Any subclass, see ``chartmigrate.core.pipeline.execute``

    Example:
        >>> from chartmigrate import migrate_file
        >>> result = migrate_file("values.yaml", workload_version="v24.1.1")
        >>> result.output_path.name
        'values-v25.1.1.yaml'
    """
    document = load_document(input_path)
    settings = load_settings(settings_path)
    return execute(
        document,
        settings,
        input_path=input_path,
        dry_run=dry_run,
        **versions,
    )
