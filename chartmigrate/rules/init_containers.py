"""Init container rules."""

from chartmigrate.models.rule import ActionKind, Concern, TransformationRule
from chartmigrate.rules.registry import register_rules


@register_rules(Concern.INIT_CONTAINERS)
def init_containers_rules() -> list[TransformationRule]:
    return [
        TransformationRule(
            id="init-container-image",
            concern=Concern.INIT_CONTAINERS,
            source="statefulset.initContainerImage",
            action=ActionKind.MOVE,
            target="statefulset.initContainers.image",
            since="v5.9.0",
            description="statefulset.initContainerImage moves to statefulset.initContainers.image",
        ),
        TransformationRule(
            id="init-container-empty-mounts",
            concern=Concern.INIT_CONTAINERS,
            source="statefulset.initContainers.*.extraVolumeMounts",
            action=ActionKind.REMOVE_IF_EMPTY,
            since="v5.9.0",
            description="Drop empty extraVolumeMounts from init containers",
        ),
    ]
