"""Schema registry: resolves chart schemas through memo, cache and fetcher."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from pydantic import ValidationError

from chartmigrate.core.exceptions import SchemaFetchError
from chartmigrate.core.schema.fetcher import SchemaFetcher
from chartmigrate.core.schema.models import SchemaDocument
from chartmigrate.core.schema.storage import InMemorySchemaCache, SchemaCache
from chartmigrate.core.versions import SemanticVersion

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Resolves the schema for a chart version.

    Lookup order is the run-scoped memo, then the cache, then the fetcher.
    Freshly fetched schemas are written back to the cache. When the fetcher
    fails and ``allow_stale`` is set, the newest cached schema with the same
    major version that is not newer than the requested one is used instead.
    """

    def __init__(
        self,
        fetcher: SchemaFetcher,
        cache: Optional[SchemaCache] = None,
        allow_stale: bool = False,
    ) -> None:
        """Initialize schema registry.

        Args:
            fetcher: Source of schemas not found in the cache.
            cache: Schema cache (defaults to InMemorySchemaCache).
            allow_stale: Fall back to a compatible cached schema when fetching fails.
        """
        self.fetcher = fetcher
        self.cache = cache if cache is not None else InMemorySchemaCache()
        self.allow_stale = allow_stale
        self._memo: Dict[str, SchemaDocument] = {}

    def fetch(self, version: str | SemanticVersion) -> SchemaDocument:
        """Return the schema for ``version``.

        Raises:
            SchemaFetchError: If the schema cannot be fetched or parsed and no
                stale fallback applies.
        """
        key = str(SemanticVersion.parse(str(version)))

        memoized = self._memo.get(key)
        if memoized is not None:
            return memoized

        cached = self.cache.load(key)
        if cached is not None:
            logger.debug("Schema cache hit", extra={"schema_version": key})
            self._memo[key] = cached
            return cached

        try:
            raw = self.fetcher.fetch(key)
            schema = self._parse(key, raw)
        except SchemaFetchError as e:
            stale = self._stale_fallback(key) if self.allow_stale else None
            if stale is None:
                raise
            logger.warning(
                f"Using stale cached schema {stale.version}: {e.message}",
                extra={"schema_version": key},
            )
            self._memo[key] = stale
            return stale

        self.cache.save(schema)
        logger.info("Fetched schema", extra={"schema_version": key, "context": {"digest": schema.digest[:12]}})
        self._memo[key] = schema
        return schema

    def _parse(self, version: str, raw: dict) -> SchemaDocument:
        try:
            return SchemaDocument.from_dict(version, raw)
        except ValidationError as e:
            raise SchemaFetchError(
                f"Schema for {version} is not a usable chart schema: {e}",
                context={"version": version},
            ) from e

    def _stale_fallback(self, version: str) -> Optional[SchemaDocument]:
        wanted = SemanticVersion.parse(version)
        candidates = sorted(
            (
                SemanticVersion.parse(v)
                for v in self.cache.list_versions()
                if SemanticVersion.is_valid(v)
            ),
            reverse=True,
        )
        for candidate in candidates:
            if candidate.major != wanted.major or candidate > wanted:
                continue
            schema = self.cache.load(str(candidate))
            if schema is not None:
                return schema
        return None
