"""Schema models for validating migrated values documents.

A chart schema is kept as the raw JSON Schema document it was fetched as.
It is checked against its own metaschema when the model is built, so a
broken schema is rejected before it reaches the cache or the validator.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for
from pydantic import BaseModel, ConfigDict, Field, field_validator

from chartmigrate.core.versions import SemanticVersion


class SchemaDocument(BaseModel):
    """A chart schema for one chart version.

    ``digest`` is the sha256 of the canonical JSON form of the raw schema and
    is used as the content address in the on-disk cache.
    """

    model_config = ConfigDict(frozen=True)

    version: str = Field(description="Chart schema version (vX.Y.Z)")
    raw: dict[str, Any] = Field(description="Schema as fetched")
    digest: str = Field(description="sha256 of the canonical raw schema")

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        SemanticVersion.parse(v)
        return v

    @field_validator("raw")
    @classmethod
    def validate_raw(cls, v: dict[str, Any]) -> dict[str, Any]:
        try:
            validator_for(v, default=Draft7Validator).check_schema(v)
        except SchemaError as e:
            location = "/".join(str(p) for p in e.absolute_path) or "/"
            raise ValueError(f"invalid JSON schema at {location}: {e.message}") from e
        return v

    @classmethod
    def from_dict(cls, version: str, data: dict[str, Any]) -> "SchemaDocument":
        """Build a schema document from parsed JSON, computing its digest."""
        return cls(version=version, raw=data, digest=compute_digest(data))

    @property
    def semantic_version(self) -> SemanticVersion:
        return SemanticVersion.parse(self.version)


def canonical_json(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_digest(data: Any) -> str:
    return hashlib.sha256(canonical_json(data).encode("utf-8")).hexdigest()
