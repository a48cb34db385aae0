"""Helm Version Stream MCP Server - Pin chart dependency versions and apply provider values."""

import uvicorn

from helm_versionstream_mcp.server import create_server
from helm_versionstream_mcp.settings import get_settings


def main() -> None:
    settings = get_settings()
    server = create_server()

    if settings.transport == "stdio":
        server.run(settings.transport)
    else:
        app = server.http_app(path="/mcp")
        uvicorn.run(app, host=settings.host, port=settings.port)
