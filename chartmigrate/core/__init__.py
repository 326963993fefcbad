"""Core module for chartmigrate package."""

from chartmigrate.core.document import ConfigDocument
from chartmigrate.core.engine import TransformationEngine, apply
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
from chartmigrate.core.pipeline import MigrationResult, execute, validate_document
from chartmigrate.core.report import AppliedRule, TransformationReport, render_report
from chartmigrate.core.versions import ResolvedVersions, SemanticVersion, detect_versions
from chartmigrate.core.writer import write_output

__all__ = [
    "ConfigDocument",
    "SemanticVersion",
    "ResolvedVersions",
    "detect_versions",
    "TransformationEngine",
    "apply",
    "AppliedRule",
    "TransformationReport",
    "render_report",
    "write_output",
    "MigrationResult",
    "execute",
    "validate_document",
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
