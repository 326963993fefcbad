"""Transformation rule and rule set models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from chartmigrate.core.document import (
    Wildcard,
    format_path,
    is_concrete,
    parse_path,
    patterns_overlap,
)
from chartmigrate.core.exceptions import RuleApplicationError
from chartmigrate.core.versions import SemanticVersion


class Concern(str, Enum):
    """Concern a rule belongs to."""

    LICENSE = "license"
    TIERED_STORAGE = "tiered_storage"
    POD_TEMPLATE = "pod_template"
    RESOURCES = "resources"
    CONSOLE = "console"
    LISTENERS = "listeners"
    INIT_CONTAINERS = "init_containers"
    SIDECARS = "sidecars"


class ActionKind(str, Enum):
    """Closed set of structural actions a rule can perform."""

    RENAME = "rename"
    MOVE = "move"
    REMOVE = "remove"
    MERGE = "merge"
    RESTRUCTURE = "restructure"
    REMOVE_IF_EMPTY = "remove_if_empty"


class MergePolicy(str, Enum):
    """Which side wins on key collisions."""

    DESTINATION_WINS = "destination_wins"
    SOURCE_WINS = "source_wins"


class Predicate(BaseModel):
    """Condition evaluated at each match site.

    ``sibling`` scope resolves ``field`` relative to the container holding
    the matched node; ``root`` scope resolves it from the document root.
    """

    model_config = ConfigDict(frozen=True)

    field: str = Field(description="Dotted path of the field to test")
    op: Literal["equals", "not_equals", "exists", "absent", "truthy", "falsy"] = Field(
        default="equals", description="Comparison to perform"
    )
    value: Any = Field(default=None, description="Literal for equals/not_equals")
    scope: Literal["sibling", "root"] = Field(
        default="sibling", description="Where the field path is resolved from"
    )

    @field_validator("field")
    @classmethod
    def validate_field(cls, v: str) -> str:
        if not is_concrete(parse_path(v)):
            raise ValueError("predicate field must not contain wildcards")
        return v


class TransformationRule(BaseModel):
    """One declarative migration step.

    Rules are immutable. The engine resolves ``source`` against the current
    document, evaluates ``predicate`` at each match and dispatches on
    ``action``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique rule identifier", min_length=1)
    concern: Concern = Field(description="Concern the rule belongs to")
    source: str = Field(description="Source path pattern (wildcards allowed)")
    action: ActionKind = Field(description="Structural action to apply")
    target: Optional[str] = Field(
        default=None,
        description="New key (rename) or destination path (move, merge)",
    )
    predicate: Optional[Predicate] = Field(
        default=None, description="Only apply where this condition holds"
    )
    merge_policy: Optional[MergePolicy] = Field(
        default=None, description="Collision policy for merges and destination clashes"
    )
    restructurer: Optional[str] = Field(
        default=None, description="Registered restructurer name (restructure only)"
    )
    flag: Optional[str] = Field(
        default=None,
        description="Sibling flag: remove_if_empty also removes when it is falsy",
    )
    chain_from: Optional[str] = Field(
        default=None, description="Rule whose output this rule consumes"
    )
    since: str = Field(description="Chart version that introduced the new shape")
    description: str = Field(default="", description="Human-readable summary")

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        parse_path(v)
        return v

    @field_validator("since")
    @classmethod
    def validate_since(cls, v: str) -> str:
        SemanticVersion.parse(v)
        return v

    @model_validator(mode="after")
    def validate_action_fields(self):
        """Check that each action carries exactly the fields it needs."""
        action = self.action
        if action == ActionKind.RENAME:
            if not self.target or len(parse_path(self.target)) != 1 or not is_concrete(
                parse_path(self.target)
            ):
                raise ValueError("rename requires a single-key target")
            if isinstance(self.source_segments[-1], (int, Wildcard)):
                raise ValueError("rename source must end in a mapping key")
        elif action in (ActionKind.MOVE, ActionKind.MERGE):
            if not self.target or not is_concrete(parse_path(self.target)):
                raise ValueError(f"{action.value} requires a concrete target path")
            if not is_concrete(self.source_segments):
                raise ValueError(f"{action.value} source must not contain wildcards")
            if patterns_overlap(self.source_segments, parse_path(self.target)):
                raise ValueError(f"{action.value} target must not be inside its source")
            if action == ActionKind.MERGE and self.merge_policy is None:
                raise ValueError("merge requires an explicit merge_policy")
        elif action == ActionKind.RESTRUCTURE:
            if not self.restructurer:
                raise ValueError("restructure requires a restructurer")
            if self.target:
                raise ValueError("restructure rewrites in place and takes no target")
        else:
            if self.target:
                raise ValueError(f"{action.value} takes no target")
        if self.flag is not None and action != ActionKind.REMOVE_IF_EMPTY:
            raise ValueError("flag is only meaningful for remove_if_empty")
        return self

    @property
    def source_segments(self) -> tuple:
        return parse_path(self.source)

    @property
    def since_version(self) -> SemanticVersion:
        return SemanticVersion.parse(self.since)


class RuleSet:
    """Ordered, validated collection of transformation rules.

    Construction enforces that ids are unique, that ``chain_from`` names an
    earlier rule, and that no two source patterns overlap unless one rule is
    chained from the other.
    """

    def __init__(
        self,
        rules: list[TransformationRule] | tuple[TransformationRule, ...],
        legacy_markers: list[str] | tuple[str, ...] = (),
    ):
        self._rules = tuple(rules)
        self._legacy_markers = tuple(legacy_markers)
        for marker in self._legacy_markers:
            parse_path(marker)
        self._check()

    @property
    def rules(self) -> tuple[TransformationRule, ...]:
        return self._rules

    @property
    def legacy_markers(self) -> tuple[str, ...]:
        return self._legacy_markers

    def __iter__(self):
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def get(self, rule_id: str) -> Optional[TransformationRule]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def by_concern(self) -> dict[Concern, list[TransformationRule]]:
        """Group rules by concern, keeping declared order."""
        grouped: dict[Concern, list[TransformationRule]] = {}
        for rule in self._rules:
            grouped.setdefault(rule.concern, []).append(rule)
        return grouped

    def between(self, source: SemanticVersion, target: SemanticVersion) -> "RuleSet":
        """Rules whose ``since`` version lies in ``(source, target]``.

        Chains are kept intact: a rule is dropped together with every rule
        chained from it.
        """
        selected: list[TransformationRule] = []
        kept: set[str] = set()
        for rule in self._rules:
            if not source < rule.since_version <= target:
                continue
            if rule.chain_from is not None and rule.chain_from not in kept:
                continue
            selected.append(rule)
            kept.add(rule.id)
        return RuleSet(selected, self._legacy_markers)

    def _check(self) -> None:
        seen: dict[str, TransformationRule] = {}
        for rule in self._rules:
            if rule.id in seen:
                raise RuleApplicationError(
                    f"Duplicate rule id '{rule.id}'", context={"rule_id": rule.id}
                )
            if rule.chain_from is not None and rule.chain_from not in seen:
                raise RuleApplicationError(
                    f"Rule '{rule.id}' is chained from unknown or later rule '{rule.chain_from}'",
                    context={"rule_id": rule.id, "chain_from": rule.chain_from},
                )
            seen[rule.id] = rule

        rules = self._rules
        for i, first in enumerate(rules):
            for second in rules[i + 1 :]:
                if not patterns_overlap(first.source_segments, second.source_segments):
                    continue
                if self._chained(first, second):
                    continue
                raise RuleApplicationError(
                    f"Rules '{first.id}' and '{second.id}' claim overlapping source paths",
                    context={
                        "first": format_path(first.source_segments),
                        "second": format_path(second.source_segments),
                    },
                )

    def _chained(self, first: TransformationRule, second: TransformationRule) -> bool:
        """True when ``second`` descends from ``first`` through chain_from links."""
        current: Optional[TransformationRule] = second
        while current is not None and current.chain_from is not None:
            if current.chain_from == first.id:
                return True
            current = self.get(current.chain_from)
        return False
