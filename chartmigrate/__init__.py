"""chartmigrate - Rule-driven Helm chart values migration.

A deterministic engine that upgrades Redpanda chart values written against
an older chart schema into documents valid against a newer one, validating
the result before anything is written.
"""

__version__ = "0.1.0"

# Public API
from chartmigrate.api import from_file, migrate_document, migrate_file

# Core classes
from chartmigrate.core.document import ConfigDocument

# Exceptions
from chartmigrate.core.exceptions import (
    ConfigError,
    DocumentShapeError,
    InputParseError,
    MigratorError,
    OutputWriteError,
    RuleApplicationError,
    SchemaFetchError,
    SchemaValidationError,
    VersionDetectionError,
)
from chartmigrate.core.pipeline import MigrationResult
from chartmigrate.core.report import TransformationReport, render_report
from chartmigrate.models.rule import RuleSet, TransformationRule
from chartmigrate.models.settings import MigratorSettings

__all__ = [
    # Version
    "__version__",
    # Public API
    "from_file",
    "migrate_document",
    "migrate_file",
    # Core classes
    "ConfigDocument",
    "MigrationResult",
    "MigratorSettings",
    "RuleSet",
    "TransformationRule",
    "TransformationReport",
    "render_report",
    # Exceptions
    "MigratorError",
    "InputParseError",
    "ConfigError",
    "DocumentShapeError",
    "VersionDetectionError",
    "RuleApplicationError",
    "SchemaFetchError",
    "SchemaValidationError",
    "OutputWriteError",
]
