"""Migration pipeline: detect, transform, fetch schema, validate, write."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from chartmigrate.core.document import ConfigDocument, parse_path, set_node
from chartmigrate.core.engine import apply
from chartmigrate.core.exceptions import DocumentShapeError, SchemaValidationError
from chartmigrate.core.parallel import run_concurrently
from chartmigrate.core.report import AppliedRule, TransformationReport
from chartmigrate.core.schema import (
    DirectorySchemaFetcher,
    HttpSchemaFetcher,
    InMemorySchemaCache,
    LocalJsonSchemaCache,
    SchemaRegistry,
    SchemaValidator,
    ValidationReport,
)
from chartmigrate.core.versions import (
    CONSOLE_VERSION_PATH,
    LATEST_CHART_VERSION,
    WORKLOAD_VERSION_PATH,
    ResolvedVersions,
    SemanticVersion,
    detect_versions,
)
from chartmigrate.core.writer import write_output
from chartmigrate.models.rule import RuleSet
from chartmigrate.models.settings import MigratorSettings
from chartmigrate.rules import default_rule_set

logger = logging.getLogger(__name__)


class MigrationResult(BaseModel):
    """Everything a migration run produced."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    document: ConfigDocument
    report: TransformationReport
    validation: ValidationReport
    versions: ResolvedVersions
    output_path: Optional[Path] = None


def build_registry(settings: MigratorSettings) -> SchemaRegistry:
    """Create the schema registry described by ``settings``."""
    if settings.schema_dir:
        fetcher = DirectorySchemaFetcher(settings.schema_dir)
    else:
        fetcher = HttpSchemaFetcher(
            url_template=settings.schema_url,
            timeout=settings.timeout,
            max_attempts=settings.max_attempts,
            retry_delay=settings.retry_delay,
            backoff_rate=settings.backoff_rate,
        )
    cache = LocalJsonSchemaCache(settings.cache_dir) if settings.cache_dir else InMemorySchemaCache()
    return SchemaRegistry(fetcher, cache=cache, allow_stale=settings.allow_stale_schema)


def execute(
    document: ConfigDocument,
    settings: MigratorSettings | None = None,
    *,
    workload_version: str | None = None,
    console_version: str | None = None,
    source_version: str | None = None,
    target_version: str | None = None,
    rule_set: RuleSet | None = None,
    registry: SchemaRegistry | None = None,
    input_path: str | Path | None = None,
    dry_run: bool = False,
) -> MigrationResult:
    """Migrate a document to the target chart schema.

    The schema fetch overlaps with rule application unless
    ``settings.parallel`` is off. Output is only written when the migrated
    document validates cleanly, an ``input_path`` is given and ``dry_run``
    is False.

    Args:
        document: Parsed values document.
        settings: Run settings (defaults when None).
        workload_version: Used when the document has no ``image.tag``.
        console_version: Used when the document has no ``console.image.tag``.
        source_version: Pinned source chart version.
        target_version: Pinned target chart version.
        rule_set: Rules to apply (the built-in catalog when None).
        registry: Schema registry (built from ``settings`` when None).
        input_path: Input file; determines output name and location.
        dry_run: Skip writing.

    Returns:
        MigrationResult

    Raises:
        VersionDetectionError: If versions are missing or malformed.
        RuleApplicationError: If the rule set is defective.
        DocumentShapeError: If the document's shape blocks a change, such as
            a scalar `image` when a version has to be stamped.
        SchemaFetchError: If the target schema is unavailable.
        SchemaValidationError: If the migrated document violates the schema.
        OutputWriteError: If the output cannot be written.
    """
    settings = settings or MigratorSettings()
    versions = detect_versions(
        document,
        workload_override=workload_version,
        console_override=console_version,
        source_override=source_version,
        target_override=target_version,
    )
    rules = (rule_set or default_rule_set()).between(versions.source, versions.target)
    registry = registry or build_registry(settings)

    logger.info(
        f"Migrating {versions.source} -> {versions.target}",
        extra={"context": {"rules": len(rules), "workload": versions.workload}},
    )

    schema, (migrated, report) = run_concurrently(
        lambda: registry.fetch(versions.target),
        lambda: apply(document, rules),
        parallel=settings.parallel,
    )
    migrated, report = stamp_versions(migrated, report, versions)

    validation = SchemaValidator().validate(migrated, schema)
    if not validation.ok:
        raise SchemaValidationError(
            validation, context={"schema_version": schema.version}
        )

    output_path = None
    if input_path is not None and not dry_run:
        output_path = write_output(
            migrated,
            input_path,
            versions.target,
            output_dir=settings.output_dir,
        )

    return MigrationResult(
        document=migrated,
        report=report,
        validation=validation,
        versions=versions,
        output_path=output_path,
    )


def stamp_versions(
    document: ConfigDocument,
    report: TransformationReport,
    versions: ResolvedVersions,
) -> tuple[ConfigDocument, TransformationReport]:
    """Write override-supplied versions into the document.

    Versions that came from the document itself are left alone.

    Raises:
        DocumentShapeError: If a scalar sits on the way to a version field.
    """
    stamps = []
    if not versions.workload_from_document:
        stamps.append(("workload-version", WORKLOAD_VERSION_PATH, versions.workload))
    if versions.console is not None and not versions.console_from_document:
        stamps.append(("console-version", CONSOLE_VERSION_PATH, versions.console))
    if not stamps:
        return document, report

    tree = document.data
    applied = list(report.applied)
    touched = set()
    for rule_id, path, version in stamps:
        try:
            set_node(tree, parse_path(path), str(version))
        except TypeError as e:
            raise DocumentShapeError(
                f"Cannot stamp {rule_id} at {path}: {e}",
                context={"path": path, "version": str(version)},
            ) from e
        touched.add(path.split(".", 1)[0])
        applied.append(
            AppliedRule(
                rule_id=rule_id,
                action="stamp",
                source_path=path,
                target_path=path,
                new_value=str(version),
            )
        )
    stamped = report.model_copy(
        update={
            "applied": applied,
            "pass_through": [k for k in report.pass_through if k not in touched],
        }
    )
    return ConfigDocument(tree), stamped


def validate_document(
    document: ConfigDocument,
    target_version: str | None = None,
    settings: MigratorSettings | None = None,
    registry: SchemaRegistry | None = None,
) -> ValidationReport:
    """Validate a document against a chart schema without migrating it."""
    settings = settings or MigratorSettings()
    registry = registry or build_registry(settings)
    target = SemanticVersion.parse(target_version) if target_version else LATEST_CHART_VERSION
    schema = registry.fetch(target)
    return SchemaValidator().validate(document, schema)
