"""Tests for the settings model."""

import pytest
from pydantic import ValidationError

from chartmigrate.core.schema import DEFAULT_SCHEMA_URL
from chartmigrate.models.settings import MigratorSettings


class TestMigratorSettings:
    def test_defaults(self):
        settings = MigratorSettings()
        assert settings.schema_url == DEFAULT_SCHEMA_URL
        assert settings.max_attempts == 3
        assert settings.parallel is True
        assert settings.allow_stale_schema is False
        assert settings.cache_dir is None

    def test_schema_url_needs_placeholder(self):
        with pytest.raises(ValidationError, match="must contain"):
            MigratorSettings(schema_url="https://example.com/values.schema.json")

    @pytest.mark.parametrize(
        "field,value",
        [("timeout", 0), ("max_attempts", 0), ("retry_delay", -1), ("backoff_rate", 0.5)],
    )
    def test_bounds(self, field, value):
        with pytest.raises(ValidationError):
            MigratorSettings(**{field: value})

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            MigratorSettings(retries=3)
