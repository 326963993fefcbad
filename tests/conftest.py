"""Pytest configuration and shared fixtures."""

import copy
import json
import tempfile
from pathlib import Path

import pytest
import yaml

from chartmigrate.core.document import ConfigDocument
from chartmigrate.core.schema import SchemaDocument
from chartmigrate.models.settings import MigratorSettings

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples" / "redpanda"
TARGET_VERSION = "v25.1.1"

LEGACY_VALUES = {
    "_comment": "exported from the v5 values.json template",
    "image": {
        "repository": "docker.redpanda.com/redpandadata/redpanda",
        "tag": "v23.2.24",
    },
    "fullnameOverride": "redpanda",
    "license_key": "",
    "license_secret_ref": {
        "secret_name": "redpanda-license",
        "secret_key": "license.key",
    },
    "statefulset": {
        "replicas": 3,
        "annotations": {"prometheus.io/scrape": "true"},
        "securityContext": {"fsGroup": 101, "runAsUser": 101},
        "tolerations": [],
        "nodeSelector": {},
        "priorityClassName": "",
        "terminationGracePeriodSeconds": 90,
        "initContainerImage": {"repository": "busybox", "tag": "latest"},
        "sideCars": {
            "controllers": {
                "image": {
                    "repository": "docker.redpanda.com/redpandadata/redpanda-operator",
                    "tag": "v2.1.10-23.2.18",
                }
            },
            "configWatcher": {"enabled": True, "extraVolumeMounts": ""},
        },
    },
    "resources": {
        "cpu": {"cores": 1},
        "memory": {"container": {"max": "2.5Gi"}},
    },
    "storage": {
        "persistentVolume": {"enabled": True, "size": "20Gi"},
        "tieredConfig": {
            "cloud_storage_enabled": False,
            "cloud_storage_region": "us-east-1",
            "cloud_storage_access_key": "AKIAEXAMPLE",
            "cloud_storage_secret_key": "",
        },
        "tieredStorageHostPath": "",
        "tieredStoragePersistentVolume": {"enabled": False},
    },
    "listeners": {
        "kafka": {
            "port": 9093,
            "external": {
                "default": {
                    "port": 9094,
                    "advertisedPort": 31092,
                    "tls": {"cert": "external", "require_client_auth": False},
                }
            },
        }
    },
    "console": {
        "enabled": True,
        "image": {"tag": "v2.3.8"},
        "console": {
            "config": {
                "kafka": {
                    "brokers": ["redpanda-0.redpanda.redpanda.svc.cluster.local:9093"]
                }
            }
        },
        "enterprise": {"licenseSecretRef": {}},
    },
}


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def legacy_values():
    """A legacy (v5.0.10) values tree touching every rule concern."""
    return copy.deepcopy(LEGACY_VALUES)


@pytest.fixture
def legacy_document(legacy_values):
    """The legacy values wrapped in a ConfigDocument."""
    return ConfigDocument(legacy_values)


@pytest.fixture
def target_schema_dict():
    """Raw v25.1.1 chart schema used by the examples."""
    with open(EXAMPLES_DIR / "schemas" / f"{TARGET_VERSION}.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def target_schema(target_schema_dict):
    """Parsed v25.1.1 SchemaDocument."""
    return SchemaDocument.from_dict(TARGET_VERSION, target_schema_dict)


@pytest.fixture
def schema_dir(temp_dir, target_schema_dict):
    """Directory holding <version>.json schema files for offline runs."""
    directory = temp_dir / "schemas"
    directory.mkdir()
    (directory / f"{TARGET_VERSION}.json").write_text(
        json.dumps(target_schema_dict), encoding="utf-8"
    )
    return directory


@pytest.fixture
def settings(schema_dir):
    """Settings reading schemas from the offline schema directory."""
    return MigratorSettings(schema_dir=str(schema_dir))


@pytest.fixture
def legacy_file(temp_dir, legacy_values):
    """Legacy values written as YAML into temp_dir."""
    path = temp_dir / "values.yaml"
    path.write_text(yaml.safe_dump(legacy_values, sort_keys=False), encoding="utf-8")
    return path
