"""Version stream lookups: pinned versions and repository prefixes."""

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from helm_versionstream_mcp.core.files import FileService
from helm_versionstream_mcp.core.workspace import WorkspaceManager
from helm_versionstream_mcp.errors import ConfigError, ParseError, wrap_error

logger = logging.getLogger(__name__)

REPOSITORIES_FILE = Path("charts") / "repositories.yml"


class VersionKind(Enum):
    """Kinds of component pinned in a version stream."""

    CHART = "chart"
    PACKAGE = "package"
    DOCKER = "docker"
    GIT = "git"

    @property
    def directory(self) -> str:
        """Top-level directory holding entries of this kind."""
        return _KIND_DIRECTORIES[self]

    @classmethod
    def parse(cls, value: "str | VersionKind") -> "VersionKind":
        """Convert a kind name such as ``"chart"`` into a VersionKind."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as e:
            valid = ", ".join(k.value for k in cls)
            raise ConfigError(f"unknown version kind '{value}', expected one of: {valid}") from e


_KIND_DIRECTORIES = {
    VersionKind.CHART: "charts",
    VersionKind.PACKAGE: "packages",
    VersionKind.DOCKER: "docker",
    VersionKind.GIT: "git",
}


class StableVersion(BaseModel):
    """A pinned entry in the version stream."""

    version: str = ""
    git_url: str = Field(default="", alias="gitUrl")
    url: str = ""
    component: str = ""
    git_range: str = Field(default="", alias="gitRange")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RepositoryPrefixes:
    """Mapping from helm repository URL to its short prefix."""

    def __init__(self, url_to_prefix: dict[str, str] | None = None) -> None:
        self._url_to_prefix: dict[str, str] = {}
        for url, prefix in (url_to_prefix or {}).items():
            self.add(url, prefix)

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "RepositoryPrefixes":
        """Build prefixes from a parsed ``repositories.yml`` document.

        Raises:
            ParseError: If the document does not have the expected shape.
        """
        prefixes = cls()
        repositories = data.get("repositories") or []
        if not isinstance(repositories, list):
            raise ParseError("'repositories' must be a list")

        for entry in repositories:
            if not isinstance(entry, dict) or not entry.get("prefix"):
                raise ParseError(f"invalid repository entry: {entry!r}")
            for url in entry.get("urls") or []:
                prefixes.add(str(url), str(entry["prefix"]))
        return prefixes

    def add(self, url: str, prefix: str) -> None:
        self._url_to_prefix[_normalize_url(url)] = prefix

    def prefix_for_url(self, url: str) -> str:
        """Return the prefix for a repository URL, or ``""`` if it has none."""
        return self._url_to_prefix.get(_normalize_url(url), "")

    def as_dict(self) -> dict[str, str]:
        return dict(self._url_to_prefix)

    def __len__(self) -> int:
        return len(self._url_to_prefix)


def _normalize_url(url: str) -> str:
    return url.strip().removesuffix("/")


class CatalogClient(Protocol):
    """What the resolution pipelines need from a version stream."""

    def stable_version(self, kind: VersionKind, name: str) -> str: ...

    def get_repository_prefixes(self) -> RepositoryPrefixes: ...


class VersionResolver:
    """Reads pinned versions from a local version stream directory.

    Entries live at ``{kind directory}/{name}.yml``, for example
    ``charts/stable/nginx.yml`` for the chart ``stable/nginx``.
    """

    def __init__(self, versions_dir: Path, files: FileService | None = None) -> None:
        self.versions_dir = versions_dir
        self._files = files or FileService()
        self._prefixes: RepositoryPrefixes | None = None

    @classmethod
    def from_source(
        cls,
        url: str,
        ref: str,
        workspace: WorkspaceManager,
        files: FileService | None = None,
    ) -> "VersionResolver":
        """Create a resolver for a version stream git URL at ``ref``.

        A ``file://`` URL or an existing local directory is used in place,
        anything else is cloned into the workspace.
        """
        local = Path(url.removeprefix("file://"))
        if url.startswith("file://") or local.is_dir():
            logger.debug(f"Using local version stream directory {local}")
            return cls(local, files)
        return cls(workspace.ensure_checkout(url, ref), files)

    def stable_version_data(self, kind: "VersionKind | str", name: str) -> StableVersion:
        """Load the full version stream entry for a component.

        Returns an empty StableVersion when the stream has no such entry.

        Raises:
            ConfigError: If the kind is unknown.
            ParseError: If the entry file is malformed.
        """
        kind = VersionKind.parse(kind)
        path = self.versions_dir / kind.directory / f"{name}.yml"
        if not self._files.exists(path):
            logger.debug(f"No version stream entry at {path}")
            return StableVersion()

        data = self._files.read_yaml_text(path)
        entry = {str(key): value for key, value in data.items() if isinstance(value, str)}
        try:
            return StableVersion.model_validate(entry)
        except ValidationError as e:
            raise ParseError(f"invalid version stream entry {path}: {e}") from e

    def stable_version(self, kind: "VersionKind | str", name: str) -> str:
        """Return the pinned version of a component, or ``""`` if unpinned."""
        return str(self.stable_version_data(kind, name).version or "")

    def get_repository_prefixes(self) -> RepositoryPrefixes:
        """Load the repository URL to prefix map of this stream."""
        if self._prefixes is None:
            path = self.versions_dir / REPOSITORIES_FILE
            if self._files.exists(path):
                try:
                    self._prefixes = RepositoryPrefixes.from_data(self._files.read_yaml(path))
                except ParseError as e:
                    raise e.wrap(f"failed to load {path}") from e
            else:
                logger.warning(f"No repository prefixes file at {path}")
                self._prefixes = RepositoryPrefixes()
        return self._prefixes


ResolverFactory = Callable[[str, str], CatalogClient]


class ResolverHandle:
    """Lazily creates, then reuses, one catalog client for a run.

    Build one handle at the start of a command and pass it to every step
    that needs version lookups.
    """

    def __init__(self, url: str, ref: str, factory: ResolverFactory) -> None:
        self.url = url
        self.ref = ref
        self._factory = factory
        self._resolver: CatalogClient | None = None

    def get(self) -> CatalogClient:
        """Return the catalog client, creating it on first use."""
        if self._resolver is None:
            try:
                self._resolver = self._factory(self.url, self.ref)
            except Exception as e:
                raise wrap_error(e, f"failed to create version resolver for {self.url}@{self.ref}") from e
        return self._resolver

