"""Core services - internal helpers for git, files, and template rendering."""

from helm_versionstream_mcp.core.files import FileService
from helm_versionstream_mcp.core.git import GitService
from helm_versionstream_mcp.core.templates import TemplateRenderer
from helm_versionstream_mcp.core.workspace import WorkspaceManager

__all__ = ["FileService", "GitService", "TemplateRenderer", "WorkspaceManager"]
