"""Value restructurers used by restructure rules.

Each restructurer dual-writes: the legacy representation stays in place and
the new representation is added next to it, so chart versions that still
read the old shape keep working during the transition.
"""

from typing import Any

from chartmigrate.rules.registry import register_restructurer


@register_restructurer("resources_requests_limits")
def resources_requests_limits(value: Any) -> Any:
    """Add Kubernetes-style ``requests``/``limits`` next to legacy resources.

    ``cpu.cores`` feeds both requests and limits. ``memory.container.min``
    feeds requests (falling back to ``max``) and ``memory.container.max``
    feeds limits.
    """
    if not isinstance(value, dict):
        return value

    cpu = value.get("cpu")
    memory = value.get("memory")
    cores = cpu.get("cores") if isinstance(cpu, dict) else None
    container = memory.get("container") if isinstance(memory, dict) else None
    mem_max = container.get("max") if isinstance(container, dict) else None
    mem_min = container.get("min") if isinstance(container, dict) else None

    requests: dict[str, Any] = {}
    limits: dict[str, Any] = {}
    if cores is not None:
        requests["cpu"] = cores
        limits["cpu"] = cores
    if mem_min is not None or mem_max is not None:
        requests["memory"] = mem_min if mem_min is not None else mem_max
    if mem_max is not None:
        limits["memory"] = mem_max

    if not requests and not limits:
        return value

    result = dict(value)
    if requests:
        result["requests"] = requests
    if limits:
        result["limits"] = limits
    return result


@register_restructurer("advertised_ports")
def advertised_ports(value: Any) -> Any:
    """Add ``advertisedPorts: [port]`` next to a legacy ``advertisedPort``."""
    if not isinstance(value, dict):
        return value
    port = value.get("advertisedPort")
    if port is None or "advertisedPorts" in value:
        return value
    result = dict(value)
    result["advertisedPorts"] = [port]
    return result
