"""Discovery of a chart's values files."""

from pathlib import Path

from helm_versionstream_mcp.core.files import FileService

SECRETS_FILE_NAME = "secrets.yaml"
VALUES_FILE_NAMES = ("values.yaml", SECRETS_FILE_NAME, "myvalues.yaml")


def discover_values_files(chart_dir: Path, files: FileService) -> list[Path]:
    """Return every values file present in ``chart_dir``, in helm's precedence order."""
    return [
        path
        for path in (chart_dir / name for name in VALUES_FILE_NAMES)
        if files.exists(path)
    ]
