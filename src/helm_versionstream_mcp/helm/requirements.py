"""Helm ``requirements.yaml`` documents and the pipeline's ``jx-requirements.yml``."""

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from helm_versionstream_mcp.core.files import FileService, to_plain
from helm_versionstream_mcp.errors import ParseError

logger = logging.getLogger(__name__)

REQUIREMENTS_FILE_NAME = "requirements.yaml"
REQUIREMENTS_CONFIG_FILE_NAME = "jx-requirements.yml"


class Dependency:
    """A single entry of a requirements document.

    Reads and writes go straight to the underlying YAML mapping, so keys this
    class knows nothing about survive a save.
    """

    def __init__(self, data: dict[str, Any]) -> None:
        self._data = data

    @property
    def name(self) -> str:
        return _text(self._data.get("name"))

    @property
    def alias(self) -> str:
        return _text(self._data.get("alias"))

    @property
    def repository(self) -> str:
        return _text(self._data.get("repository"))

    @property
    def version(self) -> str:
        return _text(self._data.get("version"))

    @version.setter
    def version(self, value: str) -> None:
        if not value:
            raise ValueError(f"refusing to clear the version of dependency {self.display_name}")
        self._data["version"] = value

    @property
    def display_name(self) -> str:
        """The alias if set, otherwise the chart name."""
        return self.alias or self.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "alias": self.alias,
            "repository": self.repository,
            "version": self.version,
        }


class RequirementsDocument:
    """Ordered dependency list of a chart, loaded and saved as a whole."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data if data is not None else {"dependencies": []}
        entries = self._data.get("dependencies")
        if entries is None:
            entries = []
            self._data["dependencies"] = entries
        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            raise ParseError("'dependencies' must be a list of mappings")
        self.dependencies = [Dependency(entry) for entry in entries]

    @classmethod
    def load(cls, path: Path, files: FileService) -> "RequirementsDocument":
        """Load a requirements file.

        Raises:
            FileStoreError: If the file cannot be read.
            ParseError: If the file is not a valid requirements document.
        """
        return cls(files.read_yaml(path))

    @classmethod
    def from_dependencies(cls, dependencies: list[dict[str, Any]]) -> "RequirementsDocument":
        return cls({"dependencies": [dict(d) for d in dependencies]})

    def save(self, path: Path, files: FileService) -> None:
        """Rewrite the whole file."""
        files.write_yaml(path, self._data)

    def to_dict(self) -> dict[str, Any]:
        return {"dependencies": [d.to_dict() for d in self.dependencies]}


class VersionStreamConfig(BaseModel):
    url: str | None = None
    ref: str | None = None


class ClusterConfig(BaseModel):
    provider: str | None = None
    namespace: str | None = None

    model_config = ConfigDict(extra="allow")


class RequirementsConfig(BaseModel):
    """The subset of ``jx-requirements.yml`` used by the helm steps."""

    version_stream: VersionStreamConfig = Field(
        default_factory=VersionStreamConfig, alias="versionStream"
    )
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def template_params(self) -> dict[str, Any]:
        """The config as exposed to values templates."""
        return self.model_dump(by_alias=True)


def find_requirements_config(
    start_dir: Path, files: FileService
) -> tuple[RequirementsConfig, Path | None]:
    """Load ``jx-requirements.yml`` from ``start_dir`` or its nearest parent.

    Returns:
        The config and the file it came from, or an empty config and None if
        no file was found.

    Raises:
        ParseError: If a config file exists but is invalid.
    """
    current = start_dir.resolve()
    for directory in (current, *current.parents):
        path = directory / REQUIREMENTS_CONFIG_FILE_NAME
        if files.exists(path):
            data = files.read_yaml(path)
            try:
                config = RequirementsConfig.model_validate(to_plain(data))
            except ValidationError as e:
                raise ParseError(f"invalid requirements config {path}: {e}") from e
            logger.debug(f"Loaded requirements config from {path}")
            return config, path

    logger.debug(f"No {REQUIREMENTS_CONFIG_FILE_NAME} found above {current}")
    return RequirementsConfig(), None


def _text(value: Any) -> str:
    return "" if value is None else str(value)

