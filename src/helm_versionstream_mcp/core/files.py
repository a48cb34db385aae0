"""File operations service for YAML documents and values trees."""

import io
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from helm_versionstream_mcp.errors import FileStoreError, ParseError


class FileService:
    """Service for file operations with YAML support.

    Uses ruamel.yaml to preserve formatting, comments, and order in YAML files
    that are loaded, mutated and written back.
    """

    def __init__(self) -> None:
        self._yaml = YAML()
        self._yaml.preserve_quotes = True
        self._yaml.indent(mapping=2, sequence=4, offset=2)
        # every scalar stays a string, e.g. version: 1.10
        self._text_yaml = YAML(typ="base")

    def exists(self, path: Path) -> bool:
        """Check whether a regular file exists.

        Raises:
            FileStoreError: If the path cannot be inspected.
        """
        try:
            return path.is_file()
        except OSError as e:
            raise FileStoreError(f"failed to check if file exists: {path}: {e}") from e

    def load(self, path: Path) -> bytes:
        """Read the raw bytes of a file."""
        try:
            return path.read_bytes()
        except OSError as e:
            raise FileStoreError(f"failed to read {path}: {e}") from e

    def save(self, path: Path, data: bytes) -> None:
        """Replace the contents of a file."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise FileStoreError(f"failed to write {path}: {e}") from e

    def read_yaml(self, path: Path) -> dict[str, Any]:
        """Read a YAML file and return its contents.

        Args:
            path: Path to the YAML file.

        Returns:
            Parsed YAML contents. Comments and key order are kept so the
            mapping can be written back with ``write_yaml``.

        Raises:
            FileStoreError: If the file cannot be read.
            ParseError: If the file cannot be parsed or is not a mapping.
        """
        return self.parse_yaml(self.load(path), source=str(path))

    def read_yaml_text(self, path: Path) -> dict[str, Any]:
        """Read a YAML file without resolving scalar types.

        Numbers and booleans come back exactly as written, so an unquoted
        ``version: 1.10`` reads as ``"1.10"``.

        Raises:
            FileStoreError: If the file cannot be read.
            ParseError: If the file cannot be parsed or is not a mapping.
        """
        return self._parse(self._text_yaml, self.load(path), str(path))

    def parse_yaml(self, data: bytes | str, *, source: str = "<data>") -> dict[str, Any]:
        """Parse YAML text into a round-trip mapping."""
        return self._parse(self._yaml, data, source)

    def _parse(self, yaml: YAML, data: bytes | str, source: str) -> dict[str, Any]:
        try:
            parsed = yaml.load(data)
        except YAMLError as e:
            raise ParseError(f"failed to parse YAML {source}: {e}") from e
        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ParseError(
                f"failed to parse YAML {source}: expected a mapping, got {type(parsed).__name__}"
            )
        return parsed

    def write_yaml(self, path: Path, data: dict[str, Any]) -> None:
        """Write data to a YAML file, preserving formatting.

        Args:
            path: Path to the YAML file.
            data: Data to write.
        """
        self.save(path, self.dump_yaml(data))

    def dump_yaml(self, data: dict[str, Any]) -> bytes:
        """Serialize a mapping to YAML bytes."""
        stream = io.BytesIO()
        self._yaml.dump(data, stream)
        return stream.getvalue()

    def load_values(self, data: bytes, *, source: str = "<values>") -> dict[str, Any]:
        """Parse helm values bytes into a values tree."""
        return self.parse_yaml(data, source=source)

    def dump_values(self, values: dict[str, Any]) -> bytes:
        """Serialize a values tree to YAML bytes."""
        return self.dump_yaml(values)


def to_plain(value: Any) -> Any:
    """Convert round-trip YAML containers into plain dicts and lists."""
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_plain(v) for v in value]
    return value
