"""Resource rules: legacy cpu/memory shape gains requests and limits."""

from chartmigrate.models.rule import ActionKind, Concern, Predicate, TransformationRule
from chartmigrate.rules.registry import register_rules


@register_rules(Concern.RESOURCES)
def resources_rules() -> list[TransformationRule]:
    return [
        TransformationRule(
            id="resources-requests-limits",
            concern=Concern.RESOURCES,
            source="resources",
            action=ActionKind.RESTRUCTURE,
            restructurer="resources_requests_limits",
            predicate=Predicate(field="resources.requests", op="absent"),
            since="v25.1.1",
            description=(
                "Dual-write resources: keep cpu.cores/memory.container and add "
                "requests/limits"
            ),
        ),
    ]
