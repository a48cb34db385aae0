"""
Shared test fixtures: an in-memory version stream and an on-disk one.
"""

import textwrap
from pathlib import Path

import pytest

from helm_versionstream_mcp.core.files import FileService
from helm_versionstream_mcp.core.templates import TemplateRenderer
from helm_versionstream_mcp.errors import FileStoreError
from helm_versionstream_mcp.versionstream.resolver import (
    RepositoryPrefixes,
    ResolverHandle,
    VersionKind,
)

CHARTS_URL = "https://charts.example.com"


class FakeCatalog:
    """Catalog client backed by dictionaries, recording every lookup."""

    def __init__(
        self,
        versions: dict[str, str] | None = None,
        prefixes: dict[str, str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.versions = versions or {}
        self.prefixes = RepositoryPrefixes(prefixes or {})
        self.failing = failing or set()
        self.lookups: list[tuple[VersionKind, str]] = []

    def stable_version(self, kind: VersionKind, name: str) -> str:
        self.lookups.append((kind, name))
        if name in self.failing:
            raise FileStoreError(f"cannot read entry {name}")
        return self.versions.get(name, "")

    def get_repository_prefixes(self) -> RepositoryPrefixes:
        return self.prefixes


class CountingFactory:
    """Resolver factory that counts how often it is called."""

    def __init__(self, catalog: FakeCatalog) -> None:
        self.catalog = catalog
        self.calls: list[tuple[str, str]] = []

    def __call__(self, url: str, ref: str) -> FakeCatalog:
        self.calls.append((url, ref))
        return self.catalog


@pytest.fixture
def files() -> FileService:
    return FileService()


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog(
        versions={"stable/nginx": "1.2.3", "stable/redis": "10.5.7"},
        prefixes={CHARTS_URL: "stable"},
    )


@pytest.fixture
def factory(catalog: FakeCatalog) -> CountingFactory:
    return CountingFactory(catalog)


@pytest.fixture
def handle(factory: CountingFactory) -> ResolverHandle:
    return ResolverHandle("https://git.example.com/versions.git", "master", factory)


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content))
    return path


@pytest.fixture
def version_stream_dir(tmp_path: Path) -> Path:
    """A minimal version stream checkout on disk."""
    root = tmp_path / "versions"
    write(root / "charts" / "repositories.yml", f"""\
        repositories:
          - prefix: stable
            urls:
              - {CHARTS_URL}
              - https://mirror.example.com/charts/
          - prefix: bitnami
            urls:
              - https://charts.bitnami.com/bitnami
    """)
    write(root / "charts" / "stable" / "nginx.yml", """\
        version: 1.2.3
        gitUrl: https://github.com/helm/charts
    """)
    write(root / "charts" / "bitnami" / "redis.yml", """\
        version: 10
    """)
    write(root / "docker" / "gcr.io" / "jenkinsxio" / "builder.yml", """\
        version: 0.0.81
    """)
    return root
