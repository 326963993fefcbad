"""Version detection for chart schema and workload versions.

Two independent axes are tracked and never conflated:

- chart schema version: the structural contract of the values document
  (source and target of a migration)
- workload version: the Redpanda image tag the document deploys
  (``image.tag``), plus the optional console companion tag
  (``console.image.tag``)
"""

from __future__ import annotations

import logging
import re
from functools import total_ordering
from typing import Optional

from pydantic import BaseModel, ConfigDict

from chartmigrate.core.document import ConfigDocument
from chartmigrate.core.exceptions import VersionDetectionError

logger = logging.getLogger(__name__)

WORKLOAD_VERSION_PATH = "image.tag"
CONSOLE_VERSION_PATH = "console.image.tag"

_VERSION_RE = re.compile(r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


@total_ordering
class SemanticVersion:
    """Strict three-component version written as ``vMAJOR.MINOR.PATCH``."""

    __slots__ = ("major", "minor", "patch")

    def __init__(self, major: int, minor: int, patch: int):
        self.major = major
        self.minor = minor
        self.patch = patch

    @classmethod
    def parse(cls, text: object) -> "SemanticVersion":
        """Parse a version string.

        Raises:
            VersionDetectionError: If the value is not a strict vX.Y.Z string.
        """
        if not isinstance(text, str):
            raise VersionDetectionError(
                "Version must be a string in vMAJOR.MINOR.PATCH form",
                context={"value": repr(text)},
            )
        match = _VERSION_RE.match(text)
        if match is None:
            raise VersionDetectionError(
                f"Malformed version '{text}': expected vMAJOR.MINOR.PATCH",
                context={"value": text},
            )
        return cls(*(int(part) for part in match.groups()))

    @staticmethod
    def is_valid(text: object) -> bool:
        return isinstance(text, str) and _VERSION_RE.match(text) is not None

    @property
    def bare(self) -> str:
        """Version without the leading ``v``."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def _key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "SemanticVersion") -> bool:
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return f"v{self.bare}"

    def __repr__(self) -> str:
        return f"SemanticVersion('{self}')"


KNOWN_CHART_VERSIONS: tuple[SemanticVersion, ...] = tuple(
    SemanticVersion.parse(v) for v in ("v5.0.10", "v5.9.0", "v25.1.1")
)
OLDEST_CHART_VERSION = min(KNOWN_CHART_VERSIONS)
LATEST_CHART_VERSION = max(KNOWN_CHART_VERSIONS)


class ResolvedVersions(BaseModel):
    """Versions resolved for one migration run."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    source: SemanticVersion
    target: SemanticVersion
    workload: SemanticVersion
    console: Optional[SemanticVersion] = None
    workload_from_document: bool = True
    console_from_document: bool = False


def detect_versions(
    document: ConfigDocument,
    workload_override: str | None = None,
    console_override: str | None = None,
    source_override: str | None = None,
    target_override: str | None = None,
) -> ResolvedVersions:
    """Resolve source/target chart versions and the workload version.

    A workload version present in the document always takes precedence: an
    override is then ignored (never merged), and a warning is logged if the
    two differ. Without a document value the override is required.

    Args:
        document: Parsed input document.
        workload_override: Workload version used when ``image.tag`` is absent.
        console_override: Console version used when ``console.image.tag`` is absent.
        source_override: Pinned source chart version (default: oldest known).
        target_override: Pinned target chart version (default: latest known).

    Returns:
        ResolvedVersions for the run.

    Raises:
        VersionDetectionError: On missing or malformed versions, or when the
            source is newer than the target.
    """
    workload, workload_from_document = _resolve_tag(
        document, WORKLOAD_VERSION_PATH, workload_override, "workload"
    )
    if workload is None:
        raise VersionDetectionError(
            "No workload version: the document has no image.tag and no override was given",
            context={"field": WORKLOAD_VERSION_PATH},
        )

    console, console_from_document = _resolve_tag(
        document, CONSOLE_VERSION_PATH, console_override, "console"
    )

    source = (
        SemanticVersion.parse(source_override) if source_override else OLDEST_CHART_VERSION
    )
    target = (
        SemanticVersion.parse(target_override) if target_override else LATEST_CHART_VERSION
    )
    if source > target:
        raise VersionDetectionError(
            f"Source chart version {source} is newer than target {target}",
            context={"source": str(source), "target": str(target)},
        )

    logger.debug(
        "Resolved versions",
        extra={
            "context": {
                "source": source,
                "target": target,
                "workload": workload,
                "console": console,
            }
        },
    )
    return ResolvedVersions(
        source=source,
        target=target,
        workload=workload,
        console=console,
        workload_from_document=workload_from_document,
        console_from_document=console_from_document,
    )


def _resolve_tag(
    document: ConfigDocument,
    path: str,
    override: str | None,
    label: str,
) -> tuple[Optional[SemanticVersion], bool]:
    present = document.get(path)
    if present is not None:
        version = SemanticVersion.parse(present)
        if override is not None and override != present:
            logger.warning(
                f"Ignoring {label} version override {override}: document pins {present}",
                extra={"context": {"field": path}},
            )
        return version, True
    if override is not None:
        return SemanticVersion.parse(override), False
    return None, False
