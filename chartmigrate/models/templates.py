"""Template rendering for settings values with Jinja2-style syntax."""

import os
import re
from typing import Any, Dict

from chartmigrate.core.exceptions import ConfigError

_TEMPLATE_RE = re.compile(r"\{\{\s*([^}]+)\s*\}\}")
_CALL_RE = re.compile(r"^(\w+)\(['\"]([^'\"]+)['\"]\)$")


def render_templates(settings_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Render Jinja2-style templates in a settings dictionary.

    Supports:
    - {{ env_var('VAR_NAME') }} - environment variable lookup

    Args:
        settings_dict: Settings dictionary (may contain template expressions)

    Returns:
        Settings dictionary with templates rendered

    Raises:
        ConfigError: On unknown functions, malformed expressions or unset
            environment variables
    """
    context = {"env_var": _get_env_var}
    return _render_dict(settings_dict, context)


def _get_env_var(key: str) -> str:
    """Get environment variable or raise error if not found."""
    value = os.environ.get(key)
    if value is None:
        raise ConfigError(
            f"Environment variable '{key}' not found",
            context={"key": key},
        )
    return value


def _render_dict(data: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
    return {key: _render_value(value, context) for key, value in data.items()}


def _render_value(value: Any, context: Dict[str, Any]) -> Any:
    if isinstance(value, dict):
        return _render_dict(value, context)
    elif isinstance(value, list):
        return [_render_value(item, context) for item in value]
    elif isinstance(value, str):
        return _render_string(value, context)
    else:
        return value


def _render_string(text: str, context: Dict[str, Any]) -> str:
    def replace(match):
        expr = match.group(1).strip()
        call = _CALL_RE.match(expr)
        if call is None:
            raise ConfigError(
                f"Template rendering failed: {expr}",
                context={"expression": expr},
            )
        func_name, arg = call.group(1), call.group(2)
        func = context.get(func_name)
        if func is None:
            raise ConfigError(
                f"Unknown function: {func_name}",
                context={"expression": expr, "available": list(context.keys())},
            )
        return str(func(arg))

    return _TEMPLATE_RE.sub(replace, text)
