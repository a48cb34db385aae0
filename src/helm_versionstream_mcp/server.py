"""FastMCP server setup and configuration."""

import hmac
import logging

from fastmcp import FastMCP
from fastmcp.server.auth import AccessToken, TokenVerifier

from helm_versionstream_mcp.helm.step import CoreServices
from helm_versionstream_mcp.settings import get_settings
from helm_versionstream_mcp.tools.step_tools import register_step_tools

logger = logging.getLogger(__name__)


class StaticTokenVerifier(TokenVerifier):
    def __init__(self, token: str, base_url: str | None = None) -> None:
        super().__init__(base_url=base_url)
        self._token = token

    async def verify_token(self, token: str) -> AccessToken | None:
        if hmac.compare_digest(token, self._token):
            return AccessToken(token=token, client_id="static", scopes=[], expires_at=None)
        return None


def create_server() -> FastMCP:
    """Create and configure the MCP server.

    Returns:
        Configured FastMCP server instance.
    """
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info(f"Workspace directory: {settings.workspace_dir}")
    logger.info(
        f"Default version stream: {settings.version_stream_url} @ {settings.version_stream_ref}"
    )

    services = CoreServices.create(settings.workspace_dir)

    token_verifier: StaticTokenVerifier | None = None
    if settings.auth_token:
        token_verifier = StaticTokenVerifier(settings.auth_token)

    mcp = FastMCP(
        "Helm Version Stream MCP",
        instructions="""
        This MCP server pins helm chart dependency versions from a version stream
        and applies cluster provider specific values overrides.

        Common flow:
        1. `verify_requirements` to fill in missing dependency versions of a chart.
        2. `apply_provider_values` to merge the provider's values.tmpl.yaml over values.yaml.
        3. `namespace_values` for the --set values scoping a release to a namespace.

        The version stream URL and ref come from the jx-requirements.yml found in
        the chart directory or one of its parents.
        """,
        auth=token_verifier,
    )

    register_step_tools(mcp, services, settings)

    return mcp
