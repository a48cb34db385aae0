"""MCP tool registration modules."""

from helm_versionstream_mcp.tools.step_tools import register_step_tools

__all__ = ["register_step_tools"]
