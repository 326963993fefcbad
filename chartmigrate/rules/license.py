"""License rules: top-level license settings move under ``enterprise``."""

from chartmigrate.models.rule import ActionKind, Concern, TransformationRule
from chartmigrate.rules.registry import register_rules


@register_rules(Concern.LICENSE)
def license_rules() -> list[TransformationRule]:
    return [
        TransformationRule(
            id="license-key",
            concern=Concern.LICENSE,
            source="license_key",
            action=ActionKind.MOVE,
            target="enterprise.license",
            since="v5.9.0",
            description="Inline license string moves to enterprise.license",
        ),
        TransformationRule(
            id="license-secret-ref",
            concern=Concern.LICENSE,
            source="license_secret_ref",
            action=ActionKind.MOVE,
            target="enterprise.licenseSecretRef",
            since="v5.9.0",
            description="License secret reference moves to enterprise.licenseSecretRef",
        ),
        TransformationRule(
            id="license-secret-ref-name",
            concern=Concern.LICENSE,
            source="enterprise.licenseSecretRef.secret_name",
            action=ActionKind.RENAME,
            target="name",
            chain_from="license-secret-ref",
            since="v5.9.0",
            description="secret_name becomes name",
        ),
        TransformationRule(
            id="license-secret-ref-key",
            concern=Concern.LICENSE,
            source="enterprise.licenseSecretRef.secret_key",
            action=ActionKind.RENAME,
            target="key",
            chain_from="license-secret-ref",
            since="v5.9.0",
            description="secret_key becomes key",
        ),
    ]
