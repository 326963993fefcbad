"""Settings model for migration runs."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chartmigrate.core.schema.fetcher import DEFAULT_SCHEMA_URL


class MigratorSettings(BaseModel):
    """Configuration for schema access and pipeline behavior.

    Loaded from an optional YAML settings file; CLI flags override the
    values found there.
    """

    model_config = ConfigDict(extra="forbid")

    schema_url: str = Field(
        default=DEFAULT_SCHEMA_URL,
        description="URL template for chart schemas; may use {version} and {bare_version}",
    )
    schema_dir: Optional[str] = Field(
        default=None,
        description="Read schemas from <schema_dir>/<version>.json instead of fetching them",
    )
    cache_dir: Optional[str] = Field(
        default=None,
        description="Directory for the on-disk schema cache (in-memory only when unset)",
    )
    timeout: float = Field(default=30.0, description="Schema request timeout in seconds", gt=0)
    max_attempts: int = Field(default=3, description="Schema request attempts", ge=1)
    retry_delay: float = Field(
        default=1.0, description="Initial delay between attempts in seconds", ge=0
    )
    backoff_rate: float = Field(
        default=2.0, description="Multiplier applied to the delay after each attempt", ge=1
    )
    allow_stale_schema: bool = Field(
        default=False,
        description="Use a compatible cached schema when fetching fails",
    )
    parallel: bool = Field(
        default=True,
        description="Fetch the schema while rules are being applied",
    )
    output_dir: Optional[str] = Field(
        default=None,
        description="Directory for migrated documents (defaults to the input's directory)",
    )

    @field_validator("schema_url")
    @classmethod
    def validate_schema_url(cls, v):
        """Validate the URL template carries a version placeholder."""
        if "{version}" not in v and "{bare_version}" not in v:
            raise ValueError("schema_url must contain {version} or {bare_version}")
        return v
