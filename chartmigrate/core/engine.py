"""Transformation engine: applies a RuleSet to a ConfigDocument.

``apply`` is a pure function. It works on a private copy of the document,
walks the rules in declared order and returns a new document together with
a TransformationReport. No I/O happens here.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Optional

from chartmigrate.core.document import (
    MISSING,
    ConfigDocument,
    PathTuple,
    delete_node,
    format_path,
    get_node,
    is_empty,
    iter_matches,
    parse_path,
    rename_key,
    set_node,
)
from chartmigrate.core.exceptions import DocumentShapeError, RuleApplicationError
from chartmigrate.core.report import (
    CONDITIONAL_SKIPPED,
    NOT_MATCHED,
    VALUE_NOT_TRANSFORMED,
    AppliedRule,
    TransformationReport,
    TransformationWarning,
)
from chartmigrate.models.rule import (
    ActionKind,
    MergePolicy,
    Predicate,
    RuleSet,
    TransformationRule,
)
from chartmigrate.rules.registry import get_restructurer

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "yes", "on", "1"}


def apply(
    document: ConfigDocument, rule_set: RuleSet
) -> tuple[ConfigDocument, TransformationReport]:
    """Apply every rule in ``rule_set`` to ``document``.

    Args:
        document: Input document (left untouched).
        rule_set: Validated, ordered rules.

    Returns:
        The migrated document and the report of applied changes.

    Raises:
        RuleApplicationError: If two rules write conflicting values to the
            same destination, or a destination is occupied by a different
            value, without a declared merge policy.
        DocumentShapeError: If the document holds a scalar where a move
            target needs a mapping.
    """
    return TransformationEngine(rule_set).apply(document)


class TransformationEngine:
    """Executes a RuleSet.

    Each ``apply`` call uses fresh run state, so one engine can be reused
    across documents.
    """

    def __init__(self, rule_set: RuleSet):
        self._rule_set = rule_set

    @property
    def rule_set(self) -> RuleSet:
        return self._rule_set

    def apply(
        self, document: ConfigDocument
    ) -> tuple[ConfigDocument, TransformationReport]:
        run = _Run(document.data)
        for rule in self._rule_set:
            run.apply_rule(rule)
        run.strip_markers(self._rule_set.legacy_markers)
        run.prune()

        report = TransformationReport(
            applied=run.applied,
            removed=run.removed,
            warnings=run.warnings,
            pass_through=[
                key
                for key in document.top_level_keys()
                if key not in run.affected_keys and key in run.tree
            ],
        )
        logger.info(
            f"Applied {len(report.applied)} change(s), removed {len(report.removed)} path(s)",
            extra={"context": {"rules": len(self._rule_set)}},
        )
        return ConfigDocument(run.tree), report


class _Run:
    """Mutable state for one engine run. Never escapes the engine."""

    def __init__(self, tree: dict[str, Any]):
        self.tree = tree
        self.applied: list[AppliedRule] = []
        self.removed: list[str] = []
        self.warnings: list[TransformationWarning] = []
        self.affected_keys: set[str] = set()
        # Containers that may have been left empty by a migration
        self._touched: set[PathTuple] = set()
        # Destination path -> (rule id, value written)
        self._written: dict[PathTuple, tuple[str, Any]] = {}
        # Source path -> rule id that consumed it
        self._consumed: dict[PathTuple, str] = {}

    def apply_rule(self, rule: TransformationRule) -> None:
        matches = list(iter_matches(self.tree, rule.source_segments))
        if not matches:
            self._warn(rule, NOT_MATCHED, rule.source, "source not present in document")
            return
        handler = _ACTIONS[rule.action]
        for path in matches:
            value = get_node(self.tree, path)
            if value is MISSING:
                continue
            if rule.predicate is not None and not self._predicate_holds(
                rule.predicate, path
            ):
                self._warn(
                    rule,
                    CONDITIONAL_SKIPPED,
                    format_path(path),
                    f"predicate {rule.predicate.field} {rule.predicate.op} did not hold",
                )
                continue
            previous = self._consumed.get(path)
            if previous is not None and rule.chain_from is None:
                raise RuleApplicationError(
                    f"Path {format_path(path)} already consumed by rule '{previous}'",
                    context={"rule_id": rule.id, "path": format_path(path)},
                )

            entry = handler(self, rule, path, value)
            if entry is None:
                self._warn(rule, VALUE_NOT_TRANSFORMED, format_path(path), "value left unchanged")
                continue
            self._consumed[path] = rule.id
            self.applied.append(entry)
            self.affected_keys.add(str(path[0]))
            logger.debug(
                f"{rule.action.value} {entry.source_path} -> {entry.target_path or '-'}",
                extra={"rule_id": rule.id},
            )

    def _warn(self, rule: TransformationRule, kind: str, path: str, message: str) -> None:
        self.warnings.append(
            TransformationWarning(rule_id=rule.id, kind=kind, path=path, message=message)
        )

    def _predicate_holds(self, predicate: Predicate, path: PathTuple) -> bool:
        base = path[:-1] if predicate.scope == "sibling" else ()
        actual = get_node(self.tree, base + parse_path(predicate.field))
        op = predicate.op
        if op == "exists":
            return actual is not MISSING
        if op == "absent":
            return actual is MISSING
        if op == "truthy":
            return actual is not MISSING and _truthy(actual)
        if op == "falsy":
            return actual is MISSING or not _truthy(actual)
        equal = actual is not MISSING and _strict_equal(actual, predicate.value)
        return equal if op == "equals" else not equal

    # -- actions -----------------------------------------------------------

    def _rename(self, rule: TransformationRule, path: PathTuple, value: Any) -> AppliedRule:
        new_path = path[:-1] + (rule.target,)
        parent = get_node(self.tree, path[:-1])
        final = self._resolve_destination(rule, new_path, value)
        if final is MISSING:
            rename_key(parent, path[-1], rule.target)
            final = value
        else:
            delete_node(self.tree, path)
            parent[rule.target] = final
        self._claim(rule, new_path, final)
        return self._entry(rule, path, value, new_path, final)

    def _move(self, rule: TransformationRule, path: PathTuple, value: Any) -> AppliedRule:
        target = parse_path(rule.target)
        final = self._resolve_destination(rule, target, value)
        if final is MISSING:
            final = value
        delete_node(self.tree, path)
        try:
            set_node(self.tree, target, final)
        except TypeError as e:
            raise DocumentShapeError(
                f"Cannot move {format_path(path)} to {rule.target}: {e}",
                context={"rule_id": rule.id, "path": format_path(path)},
            ) from e
        self._touched.add(path[:-1])
        self.affected_keys.add(str(target[0]))
        self._claim(rule, target, final)
        return self._entry(rule, path, value, target, final)

    def _remove(self, rule: TransformationRule, path: PathTuple, value: Any) -> AppliedRule:
        delete_node(self.tree, path)
        self._touched.add(path[:-1])
        self.removed.append(format_path(path))
        return self._entry(rule, path, value, None, None)

    def _remove_if_empty(
        self, rule: TransformationRule, path: PathTuple, value: Any
    ) -> Optional[AppliedRule]:
        should_remove = is_empty(value)
        if not should_remove and rule.flag is not None:
            flag_value = get_node(self.tree, path[:-1] + parse_path(rule.flag))
            should_remove = flag_value is MISSING or not _truthy(flag_value)
        if not should_remove:
            return None
        return self._remove(rule, path, value)

    def _restructure(
        self, rule: TransformationRule, path: PathTuple, value: Any
    ) -> Optional[AppliedRule]:
        restructurer = get_restructurer(rule.restructurer)
        new_value = restructurer(copy.deepcopy(value))
        if new_value == value:
            return None
        set_node(self.tree, path, new_value)
        self._claim(rule, path, new_value)
        return self._entry(rule, path, value, path, new_value)

    # -- helpers -----------------------------------------------------------

    def _resolve_destination(
        self, rule: TransformationRule, target: PathTuple, value: Any
    ) -> Any:
        """Value to store at an occupied destination, or MISSING if it is free."""
        existing = get_node(self.tree, target)
        if existing is MISSING:
            return MISSING
        if existing == value:
            return copy.deepcopy(existing)
        if rule.merge_policy is None:
            raise RuleApplicationError(
                f"Rule '{rule.id}' would overwrite {format_path(target)} "
                "with a different value and declares no merge policy",
                context={"rule_id": rule.id, "target": format_path(target)},
            )
        return merge_values(existing, value, rule.merge_policy)

    def _claim(self, rule: TransformationRule, path: PathTuple, value: Any) -> None:
        previous = self._written.get(path)
        if (
            previous is not None
            and previous[0] != rule.id
            and previous[1] != value
            and rule.merge_policy is None
        ):
            raise RuleApplicationError(
                f"Rules '{previous[0]}' and '{rule.id}' write conflicting values "
                f"to {format_path(path)}",
                context={"path": format_path(path)},
            )
        self._written[path] = (rule.id, copy.deepcopy(value))

    def _entry(
        self,
        rule: TransformationRule,
        path: PathTuple,
        old_value: Any,
        new_path: Optional[PathTuple],
        new_value: Any,
    ) -> AppliedRule:
        return AppliedRule(
            rule_id=rule.id,
            action=rule.action.value,
            source_path=format_path(path),
            old_value=copy.deepcopy(old_value),
            target_path=format_path(new_path) if new_path is not None else None,
            new_value=copy.deepcopy(new_value),
        )

    # -- post passes -------------------------------------------------------

    def strip_markers(self, markers: tuple[str, ...]) -> None:
        """Delete legacy marker fields wherever their patterns match."""
        for marker in markers:
            for path in list(iter_matches(self.tree, parse_path(marker))):
                if delete_node(self.tree, path) is MISSING:
                    continue
                self.removed.append(format_path(path))
                self.affected_keys.add(str(path[0]))
                self._touched.add(path[:-1])

    def prune(self) -> None:
        """Remove mappings and lists emptied by migrations, deepest first.

        Only containers held in mappings are pruned, so sequence indexes of
        untouched siblings never shift.
        """
        pending = set(self._touched)
        while pending:
            path = max(pending, key=lambda p: (len(p), format_path(p)))
            pending.discard(path)
            if not path or not isinstance(path[-1], str):
                continue
            node = get_node(self.tree, path)
            if not isinstance(node, (dict, list)) or node:
                continue
            delete_node(self.tree, path)
            self.removed.append(format_path(path))
            self.affected_keys.add(str(path[0]))
            if len(path) > 1:
                pending.add(path[:-1])


_ACTIONS: dict[ActionKind, Callable[..., Optional[AppliedRule]]] = {
    ActionKind.RENAME: _Run._rename,
    ActionKind.MOVE: _Run._move,
    ActionKind.REMOVE: _Run._remove,
    ActionKind.MERGE: _Run._move,
    ActionKind.RESTRUCTURE: _Run._restructure,
    ActionKind.REMOVE_IF_EMPTY: _Run._remove_if_empty,
}


def merge_values(destination: Any, source: Any, policy: MergePolicy) -> Any:
    """Deep-merge two values under an explicit collision policy.

    Mappings merge key by key (recursively); destination keys keep their
    position and new source keys are appended. Any other collision is
    decided by ``policy``.
    """
    if isinstance(destination, dict) and isinstance(source, dict):
        result = copy.deepcopy(destination)
        for key, source_value in source.items():
            if key in result:
                result[key] = merge_values(result[key], source_value, policy)
            else:
                result[key] = copy.deepcopy(source_value)
        return result
    if policy == MergePolicy.SOURCE_WINS:
        return copy.deepcopy(source)
    return copy.deepcopy(destination)


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _strict_equal(actual: Any, expected: Any) -> bool:
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return actual == expected
