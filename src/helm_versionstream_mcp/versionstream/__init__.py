"""Version stream access - pinned versions and repository prefixes."""

from helm_versionstream_mcp.versionstream.resolver import (
    CatalogClient,
    RepositoryPrefixes,
    ResolverHandle,
    StableVersion,
    VersionKind,
    VersionResolver,
)

__all__ = [
    "CatalogClient",
    "RepositoryPrefixes",
    "ResolverHandle",
    "StableVersion",
    "VersionKind",
    "VersionResolver",
]
