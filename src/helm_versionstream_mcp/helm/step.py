"""A single helm step run against one chart directory."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from helm_versionstream_mcp.core.files import FileService
from helm_versionstream_mcp.core.git import GitService
from helm_versionstream_mcp.core.templates import TemplateRenderer
from helm_versionstream_mcp.core.workspace import WorkspaceManager
from helm_versionstream_mcp.helm.overrides import apply_provider_overrides
from helm_versionstream_mcp.helm.requirements import RequirementsConfig, find_requirements_config
from helm_versionstream_mcp.helm.resolve import PersistResult, persist_missing_versions
from helm_versionstream_mcp.helm.values import discover_values_files
from helm_versionstream_mcp.settings import Settings
from helm_versionstream_mcp.versionstream.resolver import ResolverHandle, VersionResolver

logger = logging.getLogger(__name__)


@dataclass
class CoreServices:
    """Container for core services shared by every step."""

    git: GitService
    files: FileService
    workspace: WorkspaceManager
    templates: TemplateRenderer

    @classmethod
    def create(cls, workspace_dir: Path) -> "CoreServices":
        git_service = GitService()
        return cls(
            git=git_service,
            files=FileService(),
            workspace=WorkspaceManager(workspace_dir, git_service),
            templates=TemplateRenderer(),
        )


class HelmStep:
    """State of one step invocation.

    The requirements config is read once and a single version stream handle
    is created for the run; every resolution and render in the run shares it.
    """

    def __init__(self, chart_dir: Path, services: CoreServices, settings: Settings) -> None:
        self.chart_dir = chart_dir
        self.services = services
        self.settings = settings
        self.config, self.config_path = find_requirements_config(chart_dir, services.files)

        vs = self.config.version_stream
        self.handle = ResolverHandle(
            vs.url or settings.version_stream_url,
            vs.ref or settings.version_stream_ref,
            self._create_resolver,
        )

    def _create_resolver(self, url: str, ref: str) -> VersionResolver:
        return VersionResolver.from_source(
            url, ref, self.services.workspace, self.services.files
        )

    def verify_requirements(self) -> PersistResult:
        """Fill in and save any missing dependency versions of the chart."""
        return persist_missing_versions(self.chart_dir, self.handle, self.services.files)

    def values_files(self) -> list[Path]:
        return discover_values_files(self.chart_dir, self.services.files)

    def apply_provider_values(
        self,
        providers_values_dir: Path | None = None,
        values_file: str = "values.yaml",
        *,
        write: bool = False,
    ) -> bytes:
        """Merge the cluster provider's overrides over a values file of the chart.

        Args:
            providers_values_dir: Directory of provider templates; relative
                paths are taken from the chart directory.
            values_file: Values file of the chart to start from.
            write: Save the merged values back to ``values_file``.

        Returns:
            The merged values YAML.
        """
        providers_dir = providers_values_dir or self.settings.providers_values_dir
        if not providers_dir.is_absolute():
            providers_dir = self.chart_dir / providers_dir

        values_path = self.chart_dir / values_file
        files = self.services.files
        values_data = files.load(values_path) if files.exists(values_path) else b""

        merged = apply_provider_overrides(
            self.config,
            values_data,
            providers_dir,
            self.handle,
            files,
            self.services.templates,
            requirements_file=str(self.config_path or ""),
        )
        if write and merged != values_data:
            files.save(values_path, merged)
            logger.info(f"Wrote provider values to {values_path}")
        return merged

    def describe(self) -> dict[str, Any]:
        return {
            "dir": str(self.chart_dir),
            "requirements_config": str(self.config_path) if self.config_path else None,
            "provider": self.config.cluster.provider,
            "version_stream_url": self.handle.url,
            "version_stream_ref": self.handle.ref,
        }
