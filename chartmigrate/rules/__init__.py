"""Migration rule catalog.

Provides:
- Rule registry: per-concern rule factories and the default RuleSet
- Restructurer registry: value reshaping functions for restructure rules
- Built-in catalog: license, tiered storage, pod template, resources,
  console, listeners, init containers, sidecars
"""

# Registry must be imported first (catalog modules use its decorators)
from chartmigrate.rules.registry import (
    CONCERN_ORDER,
    LEGACY_MARKERS,
    clear_registry,
    default_rule_set,
    get_restructurer,
    get_rules,
    list_concerns,
    list_restructurers,
    register_restructurer,
    register_rules,
)

# Catalog modules register themselves via decorators
from chartmigrate.rules.console import console_rules
from chartmigrate.rules.init_containers import init_containers_rules
from chartmigrate.rules.license import license_rules
from chartmigrate.rules.listeners import listeners_rules
from chartmigrate.rules.pod_template import pod_template_rules
from chartmigrate.rules.resources import resources_rules
from chartmigrate.rules.restructure import advertised_ports, resources_requests_limits
from chartmigrate.rules.sidecars import sidecars_rules
from chartmigrate.rules.tiered_storage import tiered_storage_rules

__all__ = [
    # Registry
    "CONCERN_ORDER",
    "LEGACY_MARKERS",
    "register_rules",
    "get_rules",
    "list_concerns",
    "default_rule_set",
    "register_restructurer",
    "get_restructurer",
    "list_restructurers",
    "clear_registry",
    # Catalog
    "license_rules",
    "tiered_storage_rules",
    "pod_template_rules",
    "resources_rules",
    "console_rules",
    "listeners_rules",
    "init_containers_rules",
    "sidecars_rules",
    # Restructurers
    "resources_requests_limits",
    "advertised_ports",
]
