"""Loading of values documents and settings files."""

import json
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from chartmigrate.core.document import ConfigDocument
from chartmigrate.core.exceptions import ConfigError, InputParseError
from chartmigrate.models.settings import MigratorSettings
from chartmigrate.models.templates import render_templates


def load_document(path: str | Path) -> ConfigDocument:
    """
    Load a values document from a YAML or JSON file.

    Files ending in ``.json`` are parsed as JSON, everything else as YAML.

    Args:
        path: Path to the values file

    Returns:
        Parsed ConfigDocument

    Raises:
        InputParseError: If the file is missing, unreadable or unparsable, or
            its top level is not a mapping
    """
    doc_path = Path(path)
    try:
        with open(doc_path, "r", encoding="utf-8") as f:
            if doc_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise InputParseError(
            f"Input file not found: {path}", context={"path": str(path)}
        ) from e
    except OSError as e:
        raise InputParseError(
            f"Cannot read input file: {e}", context={"path": str(path)}
        ) from e
    except json.JSONDecodeError as e:
        raise InputParseError(
            f"Invalid JSON in input file: {e}", context={"path": str(path)}
        ) from e
    except yaml.YAMLError as e:
        raise InputParseError(
            f"Invalid YAML in input file: {e}", context={"path": str(path)}
        ) from e

    if not isinstance(data, dict):
        raise InputParseError(
            "Input file must contain a mapping at the top level",
            context={"path": str(path), "type": type(data).__name__},
        )

    try:
        return ConfigDocument(data)
    except TypeError as e:
        raise InputParseError(
            f"Unsupported document content: {e}", context={"path": str(path)}
        ) from e


def load_settings(path: str | Path | None = None) -> MigratorSettings:
    """
    Load settings from an optional YAML file.

    ``{{ env_var('NAME') }}`` templates are rendered before validation.

    Args:
        path: Path to the settings file; defaults apply when None

    Returns:
        MigratorSettings instance

    Raises:
        ConfigError: If the file is missing, invalid YAML, or fails validation
    """
    if path is None:
        return MigratorSettings()

    settings_path = Path(path)
    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            settings_dict = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(
            f"Settings file not found: {path}", context={"path": str(path)}
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Cannot read settings file: {e}", context={"path": str(path)}
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML in settings file: {e}", context={"path": str(path)}
        ) from e

    if settings_dict is None:
        settings_dict = {}
    if not isinstance(settings_dict, dict):
        raise ConfigError(
            "Settings file must contain a YAML dictionary",
            context={"path": str(path)},
        )

    settings_dict = render_templates(settings_dict)

    try:
        return MigratorSettings(**settings_dict)
    except ValidationError as e:
        raise ConfigError(
            f"Settings validation failed: {e}", context={"path": str(path)}
        ) from e


def apply_overrides(settings: MigratorSettings, **overrides: Any) -> MigratorSettings:
    """Return a copy of ``settings`` with every non-None override applied.

    Raises:
        ConfigError: If an override fails validation
    """
    updates: Dict[str, Any] = {k: v for k, v in overrides.items() if v is not None}
    if not updates:
        return settings
    try:
        return MigratorSettings(**{**settings.model_dump(), **updates})
    except ValidationError as e:
        raise ConfigError(f"Invalid setting override: {e}") from e
