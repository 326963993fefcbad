"""Sidecar rules: sidecars share one image in newer charts."""

from chartmigrate.models.rule import ActionKind, Concern, MergePolicy, TransformationRule
from chartmigrate.rules.registry import register_rules


@register_rules(Concern.SIDECARS)
def sidecars_rules() -> list[TransformationRule]:
    return [
        TransformationRule(
            id="sidecars-controllers-image",
            concern=Concern.SIDECARS,
            source="statefulset.sideCars.controllers.image",
            action=ActionKind.MERGE,
            target="statefulset.sideCars.image",
            merge_policy=MergePolicy.DESTINATION_WINS,
            since="v25.1.1",
            description=(
                "controllers.image merges into the shared statefulset.sideCars.image; "
                "an existing shared image wins"
            ),
        ),
        TransformationRule(
            id="sidecars-config-watcher-empty-mounts",
            concern=Concern.SIDECARS,
            source="statefulset.sideCars.configWatcher.extraVolumeMounts",
            action=ActionKind.REMOVE_IF_EMPTY,
            since="v25.1.1",
            description="Drop empty configWatcher.extraVolumeMounts",
        ),
    ]
