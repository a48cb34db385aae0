"""MCP tools for the helm version stream steps."""

import logging
from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from helm_versionstream_mcp.errors import VersionStreamError
from helm_versionstream_mcp.helm.namespace import namespace_overrides
from helm_versionstream_mcp.helm.step import CoreServices, HelmStep
from helm_versionstream_mcp.settings import Settings
from helm_versionstream_mcp.versionstream.resolver import VersionKind

logger = logging.getLogger(__name__)


def _error(tool: str, e: Exception) -> dict[str, Any]:
    logger.exception(f"Error in {tool}")
    result: dict[str, Any] = {
        "success": False,
        "error": str(e),
    }
    if isinstance(e, VersionStreamError):
        result["kind"] = e.kind.value
    return result


def register_step_tools(mcp: FastMCP, services: CoreServices, settings: Settings) -> None:
    """Register the helm step tools.

    Every tool call is its own run: it reads the chart's requirements config
    and gets a fresh version stream handle.

    Args:
        mcp: FastMCP server instance.
        services: Core services shared across calls.
        settings: Application settings.
    """

    def step(dir: str) -> HelmStep:
        return HelmStep(Path(dir), services, settings)

    # =========================================================================
    # Dependency versions
    # =========================================================================

    @mcp.tool()
    async def verify_requirements(dir: str = ".") -> dict[str, Any]:
        """Fill in missing dependency versions of a chart from the version stream.

        Dependencies without a version get the version pinned in the version
        stream for their repository prefix and name. The file is only
        rewritten when a version was added.

        Args:
            dir: Directory containing the chart's requirements.yaml.
        """
        try:
            helm_step = step(dir)
            result = helm_step.verify_requirements()
            return {
                "success": True,
                "file": str(result.path),
                "exists": result.exists,
                "modified": result.modified,
                "resolved": result.resolved,
                **helm_step.describe(),
            }
        except Exception as e:
            return _error("verify_requirements", e)

    @mcp.tool()
    async def lookup_version(kind: str, name: str, dir: str = ".") -> dict[str, Any]:
        """Look up the pinned version of a component in the version stream.

        Args:
            kind: One of chart, package, docker, git.
            name: Qualified name, e.g. "stable/nginx".
            dir: Chart directory used to find jx-requirements.yml.
        """
        try:
            resolver = step(dir).handle.get()
            version = resolver.stable_version(VersionKind.parse(kind), name)
            return {
                "success": True,
                "kind": kind,
                "name": name,
                "version": version,
                "found": bool(version),
            }
        except Exception as e:
            return _error("lookup_version", e)

    @mcp.tool()
    async def list_repository_prefixes(dir: str = ".") -> dict[str, Any]:
        """List the helm repository URL to prefix map of the version stream.

        Args:
            dir: Chart directory used to find jx-requirements.yml.
        """
        try:
            prefixes = step(dir).handle.get().get_repository_prefixes()
            return {
                "success": True,
                "prefixes": prefixes.as_dict(),
                "count": len(prefixes),
            }
        except Exception as e:
            return _error("list_repository_prefixes", e)

    # =========================================================================
    # Values
    # =========================================================================

    @mcp.tool()
    async def apply_provider_values(
        dir: str = ".",
        providers_values_dir: str | None = None,
        values_file: str = "values.yaml",
        write: bool = False,
    ) -> dict[str, Any]:
        """Merge the cluster provider's values overrides over a chart's values.

        Args:
            dir: Chart directory.
            providers_values_dir: Directory holding {provider}/values.tmpl.yaml.
            values_file: Values file of the chart to merge over.
            write: Save the merged values back to the values file.
        """
        try:
            helm_step = step(dir)
            merged = helm_step.apply_provider_values(
                Path(providers_values_dir) if providers_values_dir else None,
                values_file,
                write=write,
            )
            return {
                "success": True,
                "values": merged.decode("utf-8"),
                "written": write,
                **helm_step.describe(),
            }
        except Exception as e:
            return _error("apply_provider_values", e)

    @mcp.tool()
    async def discover_values_files(dir: str = ".") -> dict[str, Any]:
        """List the values files present in a chart directory.

        Args:
            dir: Chart directory.
        """
        try:
            found = step(dir).values_files()
            return {
                "success": True,
                "files": [str(p) for p in found],
                "count": len(found),
            }
        except Exception as e:
            return _error("discover_values_files", e)

    @mcp.tool()
    async def namespace_values(namespace: str) -> dict[str, Any]:
        """Get the helm --set values that scope a release to a namespace.

        Args:
            namespace: Target namespace.
        """
        set_values, global_values = namespace_overrides(namespace)
        return {
            "success": True,
            "set_values": set_values,
            "global_values": global_values,
        }
