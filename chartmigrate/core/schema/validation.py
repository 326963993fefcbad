"""Validation of migrated documents against a chart schema.

Schema evaluation is delegated to ``jsonschema``; this module maps its
errors onto the violation kinds the reports use and adds the chart's own
version-field check.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any, Iterator, List

from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import ValidationError as JsonSchemaError
from jsonschema.validators import validator_for
from pydantic import BaseModel, Field

from chartmigrate.core.document import ConfigDocument, get_node, parse_path, to_pointer
from chartmigrate.core.schema.models import SchemaDocument
from chartmigrate.core.versions import (
    CONSOLE_VERSION_PATH,
    WORKLOAD_VERSION_PATH,
    SemanticVersion,
)

logger = logging.getLogger(__name__)

UNKNOWN_FIELD = "unknown_field"
MISSING_REQUIRED = "missing_required"
TYPE_MISMATCH = "type_mismatch"
ENUM_MISMATCH = "enum_mismatch"
FORMAT_MISMATCH = "format_mismatch"

# jsonschema keyword -> violation kind; anything else is a format mismatch
_KINDS = {
    "additionalProperties": UNKNOWN_FIELD,
    "unevaluatedProperties": UNKNOWN_FIELD,
    "propertyNames": UNKNOWN_FIELD,
    "required": MISSING_REQUIRED,
    "dependencies": MISSING_REQUIRED,
    "dependentRequired": MISSING_REQUIRED,
    "type": TYPE_MISMATCH,
    "anyOf": TYPE_MISMATCH,
    "oneOf": TYPE_MISMATCH,
    "not": TYPE_MISMATCH,
    "enum": ENUM_MISMATCH,
    "const": ENUM_MISMATCH,
}


class ValidationIssue(BaseModel):
    path: str = Field(description="JSON pointer of the offending node")
    kind: str = Field(description="Violation kind")
    message: str


class ValidationReport(BaseModel):
    schema_version: str
    issues: List[ValidationIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


class SchemaValidator:
    """Collects every schema violation of a document.

    Validation never stops at the first problem, so a single run reports
    everything a user has to fix. The schema's ``$schema`` picks the draft;
    Draft 7 is used when it is absent.
    """

    def __init__(self, version_fields: tuple[str, ...] = (WORKLOAD_VERSION_PATH, CONSOLE_VERSION_PATH)) -> None:
        self.version_fields = version_fields

    def validate(self, document: ConfigDocument, schema: SchemaDocument) -> ValidationReport:
        tree = document.data
        validator_cls = validator_for(schema.raw, default=Draft7Validator)
        validator = validator_cls(schema.raw, format_checker=FormatChecker())

        issues: List[ValidationIssue] = []
        seen: set[tuple[str, str, str]] = set()
        for error in validator.iter_errors(_json_ready(tree)):
            for issue in _issues_for(error):
                key = (issue.path, issue.kind, issue.message)
                if key in seen:
                    continue
                seen.add(key)
                issues.append(issue)

        self._check_version_fields(tree, issues)
        logger.debug(
            f"Validation found {len(issues)} issue(s)",
            extra={"schema_version": schema.version},
        )
        return ValidationReport(schema_version=schema.version, issues=issues)

    def _check_version_fields(self, tree: dict, issues: List[ValidationIssue]) -> None:
        flagged = {(issue.path, issue.kind) for issue in issues}
        for field in self.version_fields:
            segments = parse_path(field)
            value = get_node(tree, segments)
            if not isinstance(value, str) or SemanticVersion.is_valid(value):
                continue
            pointer = to_pointer(segments)
            if (pointer, FORMAT_MISMATCH) in flagged:
                continue
            issues.append(
                ValidationIssue(
                    path=pointer,
                    kind=FORMAT_MISMATCH,
                    message=f"{value!r} is not a vMAJOR.MINOR.PATCH version",
                )
            )


def _issues_for(error: JsonSchemaError) -> Iterator[ValidationIssue]:
    segments = tuple(error.absolute_path)
    kind = _KINDS.get(str(error.validator), FORMAT_MISMATCH)

    if error.validator == "additionalProperties" and isinstance(error.instance, dict):
        for key in _extra_keys(error.instance, error.schema):
            yield ValidationIssue(
                path=to_pointer(segments + (key,)),
                kind=UNKNOWN_FIELD,
                message=f"field '{key}' is not allowed here",
            )
        return

    if error.validator == "required" and isinstance(error.instance, dict):
        for name in error.validator_value:
            if name not in error.instance:
                yield ValidationIssue(
                    path=to_pointer(segments + (name,)),
                    kind=MISSING_REQUIRED,
                    message=f"required field '{name}' is missing",
                )
        return

    yield ValidationIssue(path=to_pointer(segments), kind=kind, message=error.message)


def _extra_keys(instance: dict, schema: dict) -> list[str]:
    known = schema.get("properties", {})
    patterns = list(schema.get("patternProperties", {}))
    return [
        key
        for key in instance
        if key not in known and not any(re.search(p, key) for p in patterns)
    ]


def _json_ready(value: Any) -> Any:
    """Copy of a YAML tree in JSON terms: dates become ISO strings, keys strings."""
    if isinstance(value, dict):
        return {str(k): _json_ready(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_ready(v) for v in value]
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return value
