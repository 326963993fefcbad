"""Data models for chartmigrate."""

from chartmigrate.models.loader import apply_overrides, load_document, load_settings
from chartmigrate.models.rule import (
    ActionKind,
    Concern,
    MergePolicy,
    Predicate,
    RuleSet,
    TransformationRule,
)
from chartmigrate.models.settings import MigratorSettings

__all__ = [
    "ActionKind",
    "Concern",
    "MergePolicy",
    "Predicate",
    "RuleSet",
    "TransformationRule",
    "MigratorSettings",
    "load_document",
    "load_settings",
    "apply_overrides",
]
