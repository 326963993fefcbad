"""Pod template rules: pod-level statefulset settings move into podTemplate."""

from chartmigrate.models.rule import ActionKind, Concern, MergePolicy, TransformationRule
from chartmigrate.rules.registry import register_rules

POD_SPEC_FIELDS = (
    "securityContext",
    "tolerations",
    "nodeSelector",
    "priorityClassName",
    "terminationGracePeriodSeconds",
)


@register_rules(Concern.POD_TEMPLATE)
def pod_template_rules() -> list[TransformationRule]:
    rules = [
        TransformationRule(
            id="pod-template-annotations",
            concern=Concern.POD_TEMPLATE,
            source="statefulset.annotations",
            action=ActionKind.MERGE,
            target="statefulset.podTemplate.annotations",
            merge_policy=MergePolicy.DESTINATION_WINS,
            since="v25.1.1",
            description=(
                "statefulset.annotations merge into statefulset.podTemplate.annotations; "
                "existing podTemplate annotations win"
            ),
        ),
    ]
    for field in POD_SPEC_FIELDS:
        rules.append(
            TransformationRule(
                id=f"pod-template-{field.lower()}",
                concern=Concern.POD_TEMPLATE,
                source=f"statefulset.{field}",
                action=ActionKind.MOVE,
                target=f"statefulset.podTemplate.spec.{field}",
                since="v25.1.1",
                description=f"statefulset.{field} moves to statefulset.podTemplate.spec",
            )
        )
    return rules
