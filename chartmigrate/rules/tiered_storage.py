"""Tiered storage rules.

The flat ``storage.tiered*`` keys are regrouped under ``storage.tiered``.
Cloud credentials are dropped when cloud storage is disabled, since the
newer chart rejects credentials without a bucket to use them for.
"""

from chartmigrate.models.rule import ActionKind, Concern, TransformationRule
from chartmigrate.rules.registry import register_rules

CREDENTIAL_FIELDS = (
    "cloud_storage_access_key",
    "cloud_storage_secret_key",
    "cloud_storage_azure_shared_key",
)


@register_rules(Concern.TIERED_STORAGE)
def tiered_storage_rules() -> list[TransformationRule]:
    rules = [
        TransformationRule(
            id="tiered-config",
            concern=Concern.TIERED_STORAGE,
            source="storage.tieredConfig",
            action=ActionKind.MOVE,
            target="storage.tiered.config",
            since="v5.9.0",
            description="storage.tieredConfig moves to storage.tiered.config",
        ),
        TransformationRule(
            id="tiered-host-path",
            concern=Concern.TIERED_STORAGE,
            source="storage.tieredStorageHostPath",
            action=ActionKind.MOVE,
            target="storage.tiered.hostPath",
            since="v5.9.0",
            description="storage.tieredStorageHostPath moves to storage.tiered.hostPath",
        ),
        TransformationRule(
            id="tiered-persistent-volume",
            concern=Concern.TIERED_STORAGE,
            source="storage.tieredStoragePersistentVolume",
            action=ActionKind.MOVE,
            target="storage.tiered.persistentVolume",
            since="v5.9.0",
            description=(
                "storage.tieredStoragePersistentVolume moves to "
                "storage.tiered.persistentVolume"
            ),
        ),
    ]
    for field in CREDENTIAL_FIELDS:
        rules.append(
            TransformationRule(
                id=f"tiered-drop-{field.replace('_', '-')}",
                concern=Concern.TIERED_STORAGE,
                source=f"storage.tiered.config.{field}",
                action=ActionKind.REMOVE_IF_EMPTY,
                flag="cloud_storage_enabled",
                chain_from="tiered-config",
                since="v5.9.0",
                description=f"Drop {field} when cloud storage is disabled",
            )
        )
    return rules
