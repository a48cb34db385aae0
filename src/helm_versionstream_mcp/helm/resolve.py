"""Fill in missing dependency versions of a chart from the version stream."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from helm_versionstream_mcp.core.files import FileService
from helm_versionstream_mcp.errors import (
    ConfigError,
    ConfigReason,
    VersionStreamError,
    wrap_error,
)
from helm_versionstream_mcp.helm.requirements import REQUIREMENTS_FILE_NAME, RequirementsDocument
from helm_versionstream_mcp.versionstream.resolver import (
    CatalogClient,
    RepositoryPrefixes,
    ResolverHandle,
    VersionKind,
)

logger = logging.getLogger(__name__)


@dataclass
class PersistResult:
    """Outcome of checking a chart's requirements file."""

    path: Path
    exists: bool
    modified: bool = False
    resolved: dict[str, str] = field(default_factory=dict)


def resolve_missing_versions(
    document: RequirementsDocument,
    prefixes: RepositoryPrefixes,
    resolver: CatalogClient,
    *,
    source: str = REQUIREMENTS_FILE_NAME,
) -> dict[str, str]:
    """Set the version of every dependency that has none.

    Dependencies are processed in order and the first failure aborts; the
    caller must not persist the document in that case.

    Args:
        document: Requirements document, mutated in place.
        prefixes: Repository URL to prefix map of the version stream.
        resolver: Version stream lookups.
        source: File name used in error messages.

    Returns:
        The versions that were filled in, keyed by dependency alias or name.
        Empty when nothing changed.

    Raises:
        ConfigError: If a dependency has no repository, its repository has no
            prefix, or the version stream has no version for it.
        VersionStreamError: If a lookup fails.
    """
    resolved: dict[str, str] = {}
    for dep in document.dependencies:
        if dep.version:
            continue

        name = dep.display_name
        repo = dep.repository
        if not repo:
            raise ConfigError(
                f"cannot find a version for dependency {name} in file {source} "
                "as there is no 'repository'",
                reason=ConfigReason.MISSING_REPOSITORY,
            )

        prefix = prefixes.prefix_for_url(repo)
        if not prefix:
            raise ConfigError(
                f"the helm repository {repo} does not have an associated prefix in the "
                f"'charts/repositories.yml' file of the version stream, so the version "
                f"in file {source} cannot be defaulted",
                reason=ConfigReason.NO_PREFIX,
            )

        full_chart_name = f"{prefix}/{dep.name}"
        try:
            version = resolver.stable_version(VersionKind.CHART, full_chart_name)
        except Exception as e:
            raise wrap_error(
                e, f"failed to find version of chart {full_chart_name} in file {source}"
            ) from e

        if not version:
            raise ConfigError(
                f"failed to find a version for dependency {name} in file {source} in the "
                "current version stream - please either add an explicit version to this "
                f"file or add chart {full_chart_name} to the version stream",
                reason=ConfigReason.NO_VERSION_FOUND,
            )

        dep.version = version
        resolved[name] = version
        logger.debug(f"adding version {version} to dependency {name} in file {source}")

    return resolved


def persist_missing_versions(
    chart_dir: Path,
    handle: ResolverHandle,
    files: FileService,
) -> PersistResult:
    """Resolve missing versions in ``chart_dir/requirements.yaml`` and save them.

    A chart without a requirements file is left alone. The file is only
    rewritten when at least one version was filled in.

    Raises:
        VersionStreamError: Wrapped with the requirements file path.
    """
    path = chart_dir / REQUIREMENTS_FILE_NAME
    try:
        exists = files.exists(path)
    except VersionStreamError as e:
        raise e.wrap(f"failed to check for file {path}") from e

    if not exists:
        logger.info(f"No requirements file: {path} so not checking for missing versions")
        return PersistResult(path=path, exists=False)

    logger.info(
        f"Verifying the helm requirements versions in dir: {chart_dir} using version "
        f"stream URL: {handle.url} and git ref: {handle.ref}"
    )

    try:
        resolver = handle.get()
        prefixes = resolver.get_repository_prefixes()
    except VersionStreamError as e:
        raise e.wrap(f"failed to load repository prefixes for {path}") from e

    try:
        document = RequirementsDocument.load(path, files)
        resolved = resolve_missing_versions(document, prefixes, resolver, source=str(path))
        if resolved:
            document.save(path, files)
            logger.info(f"Added dependency versions to file {path}: {resolved}")
    except VersionStreamError as e:
        raise e.wrap(f"failed to replace missing versions in file {path}") from e

    return PersistResult(path=path, exists=True, modified=bool(resolved), resolved=resolved)
