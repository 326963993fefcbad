"""Transformation report model, summaries and rendering."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, computed_field

from chartmigrate.core.schema.validation import (
    MISSING_REQUIRED,
    UNKNOWN_FIELD,
    ValidationReport,
)
from chartmigrate.core.versions import ResolvedVersions

# Why a rule did not change anything at a site
NOT_MATCHED = "not_matched"
CONDITIONAL_SKIPPED = "conditional_skipped"
VALUE_NOT_TRANSFORMED = "value_not_transformed"

REPORT_FORMATS = ("text", "json", "yaml")

_MOVED_ACTIONS = {"rename", "move"}
_REMOVED_ACTIONS = {"remove", "remove_if_empty"}


class AppliedRule(BaseModel):
    """One non-skipped rule execution at one match site."""

    rule_id: str
    action: str
    source_path: str
    old_value: Any = None
    target_path: Optional[str] = None
    new_value: Any = None


class TransformationWarning(BaseModel):
    """A rule that was skipped, at one site or entirely."""

    rule_id: str
    kind: str = Field(description="not_matched, conditional_skipped or value_not_transformed")
    path: str = Field(description="Match site, or the source pattern when nothing matched")
    message: str


class TransformationSummary(BaseModel):
    total_transformations: int = 0
    fields_moved: int = 0
    fields_merged: int = 0
    fields_removed: int = 0
    fields_transformed: int = 0
    versions_stamped: int = 0
    skipped_transformations: int = 0


class TransformationReport(BaseModel):
    """Ordered record of what the engine changed."""

    applied: List[AppliedRule] = Field(default_factory=list)
    pass_through: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)
    warnings: List[TransformationWarning] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied or self.removed)

    @computed_field
    @property
    def summary(self) -> TransformationSummary:
        counts = TransformationSummary(
            total_transformations=len(self.applied),
            skipped_transformations=len(self.warnings),
        )
        for entry in self.applied:
            if entry.action in _MOVED_ACTIONS:
                counts.fields_moved += 1
            elif entry.action == "merge":
                counts.fields_merged += 1
            elif entry.action in _REMOVED_ACTIONS:
                counts.fields_removed += 1
            elif entry.action == "restructure":
                counts.fields_transformed += 1
            elif entry.action == "stamp":
                counts.versions_stamped += 1
        return counts


class ValidationSummary(BaseModel):
    """Totals of a validation report."""

    schema_version: str
    is_valid: bool
    total_errors: int
    missing_required_fields: int
    unknown_fields: int

    @classmethod
    def from_report(cls, validation: ValidationReport) -> "ValidationSummary":
        kinds = [issue.kind for issue in validation.issues]
        return cls(
            schema_version=validation.schema_version,
            is_valid=validation.ok,
            total_errors=len(kinds),
            missing_required_fields=kinds.count(MISSING_REQUIRED),
            unknown_fields=kinds.count(UNKNOWN_FIELD),
        )


def recommendations(
    report: TransformationReport | None,
    validation: ValidationReport | None,
) -> list[str]:
    """Follow-up advice derived from a run's reports."""
    advice = []
    if validation is not None and not validation.ok:
        summary = ValidationSummary.from_report(validation)
        if summary.missing_required_fields:
            advice.append("Add the missing required fields before deploying the values file")
        if summary.unknown_fields:
            advice.append(
                "Remove or relocate fields the target chart schema does not accept"
            )
        advice.append("Address every validation error before deploying the values file")
    if report is not None and any(w.kind == CONDITIONAL_SKIPPED for w in report.warnings):
        advice.append("Review rules skipped by their conditions; the fields they guard were kept")
    if not advice:
        advice.append("Migration completed successfully")
    return advice


def render_report(
    report: TransformationReport,
    versions: ResolvedVersions | None = None,
    validation: ValidationReport | None = None,
) -> str:
    """Render a report as an ordered, human-readable listing."""
    lines = ["=== Chart Values Migration Report ===", ""]

    if versions is not None:
        lines.append(f"Source chart version: {versions.source}")
        lines.append(f"Target chart version: {versions.target}")
        origin = "document" if versions.workload_from_document else "override"
        lines.append(f"Workload version:     {versions.workload} ({origin})")
        if versions.console is not None:
            origin = "document" if versions.console_from_document else "override"
            lines.append(f"Console version:      {versions.console} ({origin})")
        lines.append("")

    lines.append(f"Applied changes ({len(report.applied)}):")
    if not report.applied:
        lines.append("  (none)")
    for entry in report.applied:
        target = entry.target_path or entry.source_path
        if entry.action in _REMOVED_ACTIONS:
            lines.append(f"  [{entry.rule_id}] {entry.source_path} -> (removed)")
            lines.append(f"      was: {_fmt(entry.old_value)}")
            continue
        lines.append(f"  [{entry.rule_id}] {entry.source_path} -> {target}")
        if entry.old_value == entry.new_value:
            lines.append(f"      value: {_fmt(entry.new_value)}")
        else:
            lines.append(f"      - {_fmt(entry.old_value)}")
            lines.append(f"      + {_fmt(entry.new_value)}")

    if report.removed:
        lines.append("")
        lines.append(f"Removed without replacement ({len(report.removed)}):")
        lines.extend(f"  - {path}" for path in report.removed)

    lines.append("")
    lines.append(f"Unmodified top-level keys ({len(report.pass_through)}):")
    if report.pass_through:
        lines.append("  " + ", ".join(report.pass_through))
    else:
        lines.append("  (none)")

    skipped = [w for w in report.warnings if w.kind != NOT_MATCHED]
    if skipped:
        lines.append("")
        lines.append(f"Skipped rule sites ({len(skipped)}):")
        lines.extend(f"  [{w.rule_id}] {w.path}: {w.message}" for w in skipped)

    summary = report.summary
    lines.append("")
    lines.append("Summary:")
    lines.append(
        f"  {summary.total_transformations} change(s): "
        f"{summary.fields_moved} moved, {summary.fields_merged} merged, "
        f"{summary.fields_removed} removed, {summary.fields_transformed} transformed, "
        f"{summary.versions_stamped} stamped; "
        f"{summary.skipped_transformations} skipped"
    )

    if validation is not None:
        status = ValidationSummary.from_report(validation)
        lines.append(
            f"  Validation status: {'VALID' if status.is_valid else 'INVALID'} "
            f"against {status.schema_version} ({status.total_errors} error(s))"
        )

    lines.append("")
    lines.append("Recommendations:")
    lines.extend(f"  - {advice}" for advice in recommendations(report, validation))

    return "\n".join(lines)


def build_payload(
    report: TransformationReport,
    versions: ResolvedVersions | None = None,
    validation: ValidationReport | None = None,
    output_path: Path | None = None,
) -> dict[str, Any]:
    """Machine-readable form of a run for the JSON and YAML report formats."""
    payload: dict[str, Any] = {}
    if versions is not None:
        payload["source_version"] = str(versions.source)
        payload["target_version"] = str(versions.target)
        payload["workload_version"] = str(versions.workload)
        payload["console_version"] = str(versions.console) if versions.console else None
    payload["output_path"] = str(output_path) if output_path else None
    payload["report"] = report.model_dump(mode="json")
    if validation is not None:
        payload["validation"] = ValidationSummary.from_report(validation).model_dump()
        payload["issues"] = [issue.model_dump() for issue in validation.issues]
    payload["recommendations"] = recommendations(report, validation)
    return payload


def dump_payload(payload: dict[str, Any], report_format: str) -> str:
    """Serialize a payload as ``json`` or ``yaml``."""
    if report_format == "json":
        return json.dumps(payload, indent=2, default=str)
    if report_format == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, default_flow_style=False, allow_unicode=True)
    raise ValueError(f"unsupported report format: {report_format}")


def _fmt(value: Any) -> str:
    return json.dumps(value, default=str, sort_keys=False)
