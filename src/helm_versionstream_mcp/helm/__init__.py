"""Helm chart steps: dependency version pinning and provider value overrides."""

from helm_versionstream_mcp.helm.namespace import namespace_overrides, to_camel_case
from helm_versionstream_mcp.helm.overrides import apply_provider_overrides, combine_trees
from helm_versionstream_mcp.helm.requirements import (
    Dependency,
    RequirementsConfig,
    RequirementsDocument,
    find_requirements_config,
)
from helm_versionstream_mcp.helm.resolve import (
    PersistResult,
    persist_missing_versions,
    resolve_missing_versions,
)
from helm_versionstream_mcp.helm.values import discover_values_files

__all__ = [
    "Dependency",
    "PersistResult",
    "RequirementsConfig",
    "RequirementsDocument",
    "apply_provider_overrides",
    "combine_trees",
    "discover_values_files",
    "find_requirements_config",
    "namespace_overrides",
    "persist_missing_versions",
    "resolve_missing_versions",
    "to_camel_case",
]
