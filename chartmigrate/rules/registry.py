"""Rule registry for managing the per-concern rule catalog and restructurers."""

from typing import Any, Callable, overload

from chartmigrate.core.exceptions import RuleApplicationError
from chartmigrate.models.rule import Concern, RuleSet, TransformationRule

RuleFactory = Callable[[], list[TransformationRule]]
Restructurer = Callable[[Any], Any]

_rule_registry: dict[Concern, RuleFactory] = {}
_restructurer_registry: dict[str, Restructurer] = {}

# Order in which concerns are applied when building the default rule set.
CONCERN_ORDER: tuple[Concern, ...] = (
    Concern.LICENSE,
    Concern.TIERED_STORAGE,
    Concern.POD_TEMPLATE,
    Concern.RESOURCES,
    Concern.CONSOLE,
    Concern.LISTENERS,
    Concern.INIT_CONTAINERS,
    Concern.SIDECARS,
)

# Sentinel keys used as comments in JSON-era values files; never valid data.
LEGACY_MARKERS: tuple[str, ...] = ("_comment", "*._comment")


@overload
def register_rules(concern: Concern) -> Callable[[RuleFactory], RuleFactory]: ...


@overload
def register_rules(concern: Concern, factory: RuleFactory) -> None: ...


def register_rules(
    concern: Concern,
    factory: RuleFactory | None = None,
) -> Callable[[RuleFactory], RuleFactory] | None:
    """Register the rule factory for a concern.

    Can be used as a decorator or called directly:

        # As decorator
        @register_rules(Concern.LICENSE)
        def license_rules():
            return [TransformationRule(...)]

        # Direct call
        register_rules(Concern.LICENSE, license_rules)

    Raises:
        RuleApplicationError: If the concern already has a factory.
    """

    def _register(f: RuleFactory) -> RuleFactory:
        if concern in _rule_registry:
            raise RuleApplicationError(
                f"Rules for concern '{concern.value}' are already registered",
                context={"concern": concern.value},
            )
        _rule_registry[concern] = f
        return f

    if factory is not None:
        _register(factory)
        return None

    return _register


def get_rules(concern: Concern) -> list[TransformationRule]:
    """Build the rules registered for a concern.

    Raises:
        RuleApplicationError: If the concern has no registered factory.
    """
    factory = _rule_registry.get(concern)
    if factory is None:
        available = ", ".join(sorted(c.value for c in _rule_registry)) or "(none)"
        raise RuleApplicationError(
            f"No rules registered for concern '{concern.value}'",
            context={"concern": concern.value, "available_concerns": available},
        )
    return factory()


def list_concerns() -> list[Concern]:
    """Registered concerns in application order."""
    ordered = [c for c in CONCERN_ORDER if c in _rule_registry]
    extra = [c for c in _rule_registry if c not in CONCERN_ORDER]
    return ordered + extra


def default_rule_set() -> RuleSet:
    """The full catalog as one validated RuleSet."""
    rules: list[TransformationRule] = []
    for concern in list_concerns():
        rules.extend(get_rules(concern))
    return RuleSet(rules, legacy_markers=LEGACY_MARKERS)


def register_restructurer(name: str) -> Callable[[Restructurer], Restructurer]:
    """Decorator registering a value restructurer under ``name``.

    A restructurer receives a private copy of the matched value and returns
    the reshaped value. Returning an equal value means "nothing to do".
    """

    def _register(f: Restructurer) -> Restructurer:
        if name in _restructurer_registry:
            raise RuleApplicationError(
                f"Restructurer '{name}' is already registered",
                context={"restructurer": name},
            )
        _restructurer_registry[name] = f
        return f

    return _register


def get_restructurer(name: str) -> Restructurer:
    """Look up a restructurer.

    Raises:
        RuleApplicationError: If no restructurer has that name.
    """
    restructurer = _restructurer_registry.get(name)
    if restructurer is None:
        available = ", ".join(sorted(_restructurer_registry)) or "(none)"
        raise RuleApplicationError(
            f"Unknown restructurer: '{name}'",
            context={"restructurer": name, "available": available},
        )
    return restructurer


def list_restructurers() -> list[str]:
    return sorted(_restructurer_registry)


def clear_registry() -> None:
    """Clear all registered rules and restructurers.

    Intended for testing only.
    """
    _rule_registry.clear()
    _restructurer_registry.clear()
