"""Console rules for the bundled console subchart."""

from chartmigrate.models.rule import ActionKind, Concern, TransformationRule
from chartmigrate.rules.registry import register_rules


@register_rules(Concern.CONSOLE)
def console_rules() -> list[TransformationRule]:
    return [
        TransformationRule(
            id="console-config",
            concern=Concern.CONSOLE,
            source="console.console.config",
            action=ActionKind.MOVE,
            target="console.config",
            since="v25.1.1",
            description="console.console.config is flattened to console.config",
        ),
        TransformationRule(
            id="console-enterprise",
            concern=Concern.CONSOLE,
            source="console.enterprise",
            action=ActionKind.REMOVE,
            since="v25.1.1",
            description="Console inherits the license from enterprise; its own block is dropped",
        ),
    ]
