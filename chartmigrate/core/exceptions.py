"""Exception hierarchy for the chartmigrate package."""

from typing import Any


class MigratorError(Exception):
    """Base exception for all chartmigrate errors."""

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class InputParseError(MigratorError):
    """Raised when the input document cannot be read or parsed."""

    pass


class ConfigError(MigratorError):
    """Raised when a settings file is invalid."""

    pass


class VersionDetectionError(MigratorError):
    """Raised when a version is missing, ambiguous or malformed."""

    pass


class RuleApplicationError(MigratorError):
    """Raised when the rule set is defective.

    Conflicting writes to one destination without a merge policy, overlapping
    source paths without chaining, or unknown restructurers all indicate a
    rule-set bug rather than a problem with the document.
    """

    pass


class DocumentShapeError(MigratorError):
    """Raised when the document's own shape blocks a change.

    For example a scalar sits where a rule or a version override needs a
    mapping. The document has to be fixed; the rule set is fine.
    """

    pass


class SchemaFetchError(MigratorError):
    """Raised when a schema cannot be fetched and no fallback is allowed."""

    pass


class SchemaValidationError(MigratorError):
    """Raised when the migrated document violates the target schema.

    Carries the complete validation report so every violation can be shown
    at once.
    """

    def __init__(self, report: Any, context: dict | None = None):
        issues = list(report.issues)
        lines = [f"{len(issues)} schema violation(s):"]
        lines.extend(f"  {issue.path or '/'}: [{issue.kind}] {issue.message}" for issue in issues)
        super().__init__("\n".join(lines), context=context)
        self.report = report


class OutputWriteError(MigratorError):
    """Raised when the migrated document cannot be written."""

    pass
