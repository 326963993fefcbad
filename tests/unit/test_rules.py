"""Tests for the rule model, RuleSet checks and the rule registry."""

import pytest
from pydantic import ValidationError

from chartmigrate.core.exceptions import RuleApplicationError
from chartmigrate.core.versions import SemanticVersion
from chartmigrate.models.rule import (
    ActionKind,
    Concern,
    MergePolicy,
    Predicate,
    RuleSet,
    TransformationRule,
)
from chartmigrate.rules import registry
from chartmigrate.rules import default_rule_set, get_restructurer, list_concerns


def make_rule(rule_id="r1", source="a.b", action=ActionKind.REMOVE, **kwargs):
    kwargs.setdefault("since", "v5.9.0")
    return TransformationRule(
        id=rule_id,
        concern=Concern.LICENSE,
        source=source,
        action=action,
        **kwargs,
    )


class TestTransformationRule:
    """Tests for per-action field requirements."""

    def test_rename_requires_single_key_target(self):
        with pytest.raises(ValidationError, match="single-key target"):
            make_rule(action=ActionKind.RENAME, target="x.y")
        rule = make_rule(action=ActionKind.RENAME, target="c")
        assert rule.target == "c"

    def test_move_requires_concrete_target(self):
        with pytest.raises(ValidationError, match="concrete target"):
            make_rule(action=ActionKind.MOVE, target="x.*")
        with pytest.raises(ValidationError, match="concrete target"):
            make_rule(action=ActionKind.MOVE)

    def test_move_target_inside_source(self):
        with pytest.raises(ValidationError, match="inside its source"):
            make_rule(action=ActionKind.MOVE, target="a.b.c")

    def test_merge_requires_policy(self):
        with pytest.raises(ValidationError, match="merge_policy"):
            make_rule(action=ActionKind.MERGE, target="x.y")
        rule = make_rule(
            action=ActionKind.MERGE, target="x.y", merge_policy=MergePolicy.SOURCE_WINS
        )
        assert rule.merge_policy == MergePolicy.SOURCE_WINS

    def test_restructure_requires_restructurer(self):
        with pytest.raises(ValidationError, match="restructurer"):
            make_rule(action=ActionKind.RESTRUCTURE)

    def test_remove_takes_no_target(self):
        with pytest.raises(ValidationError, match="takes no target"):
            make_rule(action=ActionKind.REMOVE, target="x")

    def test_flag_only_for_remove_if_empty(self):
        with pytest.raises(ValidationError, match="flag"):
            make_rule(action=ActionKind.REMOVE, flag="enabled")
        make_rule(action=ActionKind.REMOVE_IF_EMPTY, flag="enabled")

    def test_since_must_be_strict_version(self):
        with pytest.raises(Exception):
            make_rule(since="5.9.0")

    def test_rules_are_frozen(self):
        rule = make_rule()
        with pytest.raises(ValidationError):
            rule.id = "other"

    def test_predicate_field_must_be_concrete(self):
        with pytest.raises(ValidationError, match="wildcards"):
            Predicate(field="a.*", op="exists")


class TestRuleSet:
    """Tests for RuleSet construction checks and filtering."""

    def test_duplicate_ids_rejected(self):
        with pytest.raises(RuleApplicationError, match="Duplicate rule id"):
            RuleSet([make_rule("r1", "a"), make_rule("r1", "b")])

    def test_overlapping_sources_rejected(self):
        with pytest.raises(RuleApplicationError, match="overlapping"):
            RuleSet([make_rule("r1", "a.*"), make_rule("r2", "a.b.c")])

    def test_chained_overlap_allowed(self):
        first = make_rule("r1", "a.*.x", action=ActionKind.RENAME, target="y")
        second = make_rule(
            "r2",
            "a.*",
            action=ActionKind.RESTRUCTURE,
            restructurer="advertised_ports",
            chain_from="r1",
        )
        rules = RuleSet([first, second])
        assert len(rules) == 2

    def test_chain_from_must_be_earlier(self):
        with pytest.raises(RuleApplicationError, match="chained from unknown"):
            RuleSet([make_rule("r1", "a", chain_from="r2"), make_rule("r2", "b")])

    def test_between_filters_by_since(self):
        rules = RuleSet(
            [
                make_rule("old", "a", since="v5.9.0"),
                make_rule("new", "b", since="v25.1.1"),
            ]
        )
        selected = rules.between(
            SemanticVersion.parse("v5.9.0"), SemanticVersion.parse("v25.1.1")
        )
        assert [r.id for r in selected] == ["new"]

    def test_between_drops_whole_chain(self):
        rules = RuleSet(
            [
                make_rule("parent", "a", since="v25.1.1"),
                make_rule("child", "b", since="v5.9.0", chain_from="parent"),
            ]
        )
        selected = rules.between(
            SemanticVersion.parse("v5.0.10"), SemanticVersion.parse("v5.9.0")
        )
        assert len(selected) == 0


class TestRegistry:
    """Tests for the rule and restructurer registries."""

    def test_default_rule_set_covers_every_concern(self):
        rules = default_rule_set()
        assert set(rules.by_concern()) == set(Concern)
        assert list_concerns()[0] == Concern.LICENSE
        assert "_comment" in rules.legacy_markers

    def test_register_rules_decorator_and_direct(self, monkeypatch):
        monkeypatch.setattr(registry, "_rule_registry", {})

        @registry.register_rules(Concern.CONSOLE)
        def console():
            return [make_rule("c1", "x")]

        registry.register_rules(Concern.LICENSE, lambda: [make_rule("l1", "y")])
        assert [r.id for r in registry.get_rules(Concern.CONSOLE)] == ["c1"]
        assert registry.list_concerns() == [Concern.LICENSE, Concern.CONSOLE]

    def test_register_duplicate_concern(self, monkeypatch):
        monkeypatch.setattr(registry, "_rule_registry", {})
        registry.register_rules(Concern.CONSOLE, lambda: [])
        with pytest.raises(RuleApplicationError, match="already registered"):
            registry.register_rules(Concern.CONSOLE, lambda: [])

    def test_get_rules_unknown_concern(self, monkeypatch):
        monkeypatch.setattr(registry, "_rule_registry", {})
        with pytest.raises(RuleApplicationError, match="No rules registered"):
            registry.get_rules(Concern.SIDECARS)

    def test_unknown_restructurer(self):
        with pytest.raises(RuleApplicationError, match="Unknown restructurer"):
            get_restructurer("does_not_exist")
