"""Tests for report rendering."""

import json

import pytest
import yaml

from chartmigrate.core.document import ConfigDocument
from chartmigrate.core.report import (
    CONDITIONAL_SKIPPED,
    NOT_MATCHED,
    AppliedRule,
    TransformationReport,
    TransformationSummary,
    TransformationWarning,
    ValidationSummary,
    build_payload,
    dump_payload,
    recommendations,
    render_report,
)
from chartmigrate.core.schema.validation import (
    MISSING_REQUIRED,
    TYPE_MISMATCH,
    UNKNOWN_FIELD,
    ValidationIssue,
    ValidationReport,
)
from chartmigrate.core.versions import detect_versions


def test_render_empty_report():
    text = render_report(TransformationReport(pass_through=["image"]))
    assert "Applied changes (0):" in text
    assert "(none)" in text
    assert "Unmodified top-level keys (1):\n  image" in text
    assert not TransformationReport().changed


def test_render_changes_in_order():
    report = TransformationReport(
        applied=[
            AppliedRule(
                rule_id="license-key",
                action="move",
                source_path="license_key",
                old_value="abc",
                target_path="enterprise.license",
                new_value="abc",
            ),
            AppliedRule(
                rule_id="statefulset-security-context",
                action="remove",
                source_path="statefulset.securityContext",
                old_value={"fsGroup": 101},
            ),
            AppliedRule(
                rule_id="mount-type",
                action="rename",
                source_path="storage.tiered.mountType",
                old_value="none",
                target_path="storage.tiered.mountType",
                new_value="emptyDir",
            ),
        ],
        removed=["statefulset.tolerations"],
    )
    text = render_report(report)
    assert report.changed
    assert text.index("[license-key]") < text.index("[statefulset-security-context]")
    assert "license_key -> enterprise.license" in text
    assert 'value: "abc"' in text
    assert "statefulset.securityContext -> (removed)" in text
    assert '- "none"' in text and '+ "emptyDir"' in text
    assert "Removed without replacement (1):" in text


def test_render_versions_header():
    versions = detect_versions(
        ConfigDocument({"image": {}}), workload_override="v24.1.1"
    )
    text = render_report(TransformationReport(), versions)
    assert "Workload version:     v24.1.1 (override)" in text
    assert "Target chart version: v25.1.1" in text


def sample_report():
    return TransformationReport(
        applied=[
            AppliedRule(rule_id="a", action="move", source_path="x", target_path="y"),
            AppliedRule(rule_id="b", action="rename", source_path="p.q", target_path="p.r"),
            AppliedRule(rule_id="c", action="merge", source_path="m", target_path="n"),
            AppliedRule(rule_id="d", action="remove", source_path="z"),
            AppliedRule(rule_id="e", action="remove_if_empty", source_path="w"),
            AppliedRule(rule_id="f", action="restructure", source_path="r", target_path="r"),
            AppliedRule(rule_id="workload-version", action="stamp", source_path="image.tag"),
        ],
        warnings=[
            TransformationWarning(
                rule_id="g", kind=CONDITIONAL_SKIPPED, path="on.x", message="predicate enabled falsy did not hold"
            ),
            TransformationWarning(
                rule_id="h", kind=NOT_MATCHED, path="license_key", message="source not present in document"
            ),
        ],
    )


def invalid_validation():
    return ValidationReport(
        schema_version="v25.1.1",
        issues=[
            ValidationIssue(path="/image/repository", kind=MISSING_REQUIRED, message="missing"),
            ValidationIssue(path="/license_key", kind=UNKNOWN_FIELD, message="not allowed"),
            ValidationIssue(path="/replicas", kind=TYPE_MISMATCH, message="not an integer"),
        ],
    )


class TestTransformationSummary:
    def test_counts_by_action(self):
        summary = sample_report().summary
        assert summary == TransformationSummary(
            total_transformations=7,
            fields_moved=2,
            fields_merged=1,
            fields_removed=2,
            fields_transformed=1,
            versions_stamped=1,
            skipped_transformations=2,
        )

    def test_summary_is_part_of_the_dump(self):
        dumped = sample_report().model_dump(mode="json")
        assert dumped["summary"]["fields_moved"] == 2
        assert dumped["warnings"][0]["kind"] == CONDITIONAL_SKIPPED


class TestValidationSummary:
    def test_invalid_totals(self):
        summary = ValidationSummary.from_report(invalid_validation())
        assert not summary.is_valid
        assert summary.total_errors == 3
        assert summary.missing_required_fields == 1
        assert summary.unknown_fields == 1

    def test_valid(self):
        summary = ValidationSummary.from_report(ValidationReport(schema_version="v25.1.1"))
        assert summary.is_valid
        assert summary.total_errors == 0


class TestRecommendations:
    def test_clean_run(self):
        assert recommendations(TransformationReport(), ValidationReport(schema_version="v25.1.1")) == [
            "Migration completed successfully"
        ]

    def test_invalid_document(self):
        advice = recommendations(None, invalid_validation())
        assert any("missing required fields" in a for a in advice)
        assert any("Remove or relocate" in a for a in advice)
        assert any("Address every validation error" in a for a in advice)
        assert "Migration completed successfully" not in advice

    def test_conditional_skips_are_flagged(self):
        advice = recommendations(sample_report(), ValidationReport(schema_version="v25.1.1"))
        assert advice == ["Review rules skipped by their conditions; the fields they guard were kept"]


class TestRenderSummary:
    def test_summary_status_and_recommendations(self):
        text = render_report(sample_report(), validation=ValidationReport(schema_version="v25.1.1"))
        assert "Summary:" in text
        assert "7 change(s): 2 moved, 1 merged, 2 removed, 1 transformed, 1 stamped; 2 skipped" in text
        assert "Validation status: VALID against v25.1.1 (0 error(s))" in text
        assert text.index("Summary:") < text.index("Recommendations:")

    def test_skipped_sites_listed_without_unmatched_rules(self):
        text = render_report(sample_report())
        assert "Skipped rule sites (1):" in text
        assert "[g] on.x: predicate enabled falsy did not hold" in text
        assert "[h]" not in text
        assert "Validation status" not in text

    def test_invalid_status(self):
        text = render_report(TransformationReport(), validation=invalid_validation())
        assert "Validation status: INVALID against v25.1.1 (3 error(s))" in text


class TestPayload:
    def test_yaml_payload(self):
        versions = detect_versions(ConfigDocument({"image": {}}), workload_override="v24.1.1")
        payload = build_payload(
            sample_report(), versions, ValidationReport(schema_version="v25.1.1")
        )
        loaded = yaml.safe_load(dump_payload(payload, "yaml"))
        assert loaded["workload_version"] == "v24.1.1"
        assert loaded["validation"]["is_valid"] is True
        assert loaded["report"]["summary"]["total_transformations"] == 7
        assert loaded["recommendations"] == payload["recommendations"]
        assert list(loaded) == list(payload)

    def test_json_payload_matches_yaml(self):
        payload = build_payload(sample_report(), validation=invalid_validation())
        assert json.loads(dump_payload(payload, "json")) == yaml.safe_load(
            dump_payload(payload, "yaml")
        )
        assert payload["validation"]["total_errors"] == 3
        assert len(payload["issues"]) == 3

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="unsupported report format"):
            dump_payload({}, "xml")
