"""Schema cache interfaces."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import ValidationError

from chartmigrate.core.exceptions import SchemaFetchError
from chartmigrate.core.schema.models import SchemaDocument, canonical_json
from chartmigrate.core.versions import SemanticVersion


class SchemaCache(Protocol):
    def save(self, schema: SchemaDocument) -> None: ...

    def load(self, version: str) -> Optional[SchemaDocument]: ...

    def list_versions(self) -> List[str]: ...


class InMemorySchemaCache:
    def __init__(self) -> None:
        self._store: Dict[str, SchemaDocument] = {}

    def save(self, schema: SchemaDocument) -> None:
        self._store[schema.version] = schema

    def load(self, version: str) -> Optional[SchemaDocument]:
        return self._store.get(version)

    def list_versions(self) -> List[str]:
        return list(self._store.keys())


class LocalJsonSchemaCache:
    """Content-addressed JSON file cache for chart schemas.

    Layout::

        <base>/objects/<digest>.json    schema body, named by its sha256
        <base>/versions/<version>.ref   digest of the schema for a version

    Every file is written to a unique temp file in the same directory and
    then moved into place with ``os.replace``, so concurrent readers never
    see a partial file and racing writers of the same version both leave a
    complete, valid entry.
    """

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path)
        self._objects = self.base_path / "objects"
        self._versions = self.base_path / "versions"
        try:
            self._objects.mkdir(parents=True, exist_ok=True)
            self._versions.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SchemaFetchError(
                f"Cannot create schema cache at {self.base_path}: {e}",
                context={"cache_dir": str(self.base_path)},
            ) from e

    def save(self, schema: SchemaDocument) -> None:
        object_path = self._objects / f"{schema.digest}.json"
        try:
            if not object_path.exists():
                _atomic_write(object_path, canonical_json(schema.raw))
            _atomic_write(self._versions / f"{schema.version}.ref", schema.digest)
        except OSError as e:
            raise SchemaFetchError(
                f"Failed to write schema {schema.version} to cache: {e}",
                context={"cache_dir": str(self.base_path), "version": schema.version},
            ) from e

    def load(self, version: str) -> Optional[SchemaDocument]:
        """Load a cached schema, or None on a miss.

        A reference whose object is missing, is not a valid JSON schema, or
        no longer matches its digest counts as a miss.
        """
        ref_path = self._versions / f"{version}.ref"
        if not ref_path.exists():
            return None
        try:
            digest = ref_path.read_text(encoding="utf-8").strip()
            object_path = self._objects / f"{digest}.json"
            if not object_path.exists():
                return None
            data = json.loads(object_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None
        if not isinstance(data, dict):
            return None
        try:
            schema = SchemaDocument.from_dict(version, data)
        except ValidationError:
            return None
        if schema.digest != digest:
            return None
        return schema

    def list_versions(self) -> List[str]:
        return sorted(
            p.stem for p in self._versions.glob("*.ref") if SemanticVersion.is_valid(p.stem)
        )


def _atomic_write(path: Path, text: str) -> None:
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise
