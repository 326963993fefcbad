"""Schema package: chart schema models, fetching, caching and validation."""

from chartmigrate.core.schema.fetcher import (
    DEFAULT_SCHEMA_URL,
    DirectorySchemaFetcher,
    HttpSchemaFetcher,
    SchemaFetcher,
)
from chartmigrate.core.schema.models import SchemaDocument
from chartmigrate.core.schema.registry import SchemaRegistry
from chartmigrate.core.schema.storage import (
    InMemorySchemaCache,
    LocalJsonSchemaCache,
    SchemaCache,
)
from chartmigrate.core.schema.validation import (
    SchemaValidator,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    "DEFAULT_SCHEMA_URL",
    "SchemaFetcher",
    "HttpSchemaFetcher",
    "DirectorySchemaFetcher",
    "SchemaDocument",
    "SchemaRegistry",
    "SchemaCache",
    "InMemorySchemaCache",
    "LocalJsonSchemaCache",
    "SchemaValidator",
    "ValidationIssue",
    "ValidationReport",
]
