"""Listener rules for external listener definitions."""

from chartmigrate.models.rule import ActionKind, Concern, TransformationRule
from chartmigrate.rules.registry import register_rules


@register_rules(Concern.LISTENERS)
def listeners_rules() -> list[TransformationRule]:
    return [
        TransformationRule(
            id="listeners-require-client-auth",
            concern=Concern.LISTENERS,
            source="listeners.*.external.*.tls.require_client_auth",
            action=ActionKind.RENAME,
            target="requireClientAuth",
            since="v5.9.0",
            description="tls.require_client_auth becomes tls.requireClientAuth",
        ),
        TransformationRule(
            id="listeners-advertised-ports",
            concern=Concern.LISTENERS,
            source="listeners.*.external.*",
            action=ActionKind.RESTRUCTURE,
            restructurer="advertised_ports",
            chain_from="listeners-require-client-auth",
            since="v5.9.0",
            description="Dual-write advertisedPort as advertisedPorts: [port]",
        ),
    ]
