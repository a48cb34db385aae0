"""Provider specific helm value overrides."""

import logging
from pathlib import Path
from typing import Any

from helm_versionstream_mcp.core.files import FileService, to_plain
from helm_versionstream_mcp.core.templates import TemplateRenderer
from helm_versionstream_mcp.errors import VersionStreamError
from helm_versionstream_mcp.helm.functions import create_function_map
from helm_versionstream_mcp.helm.requirements import RequirementsConfig
from helm_versionstream_mcp.versionstream.resolver import ResolverHandle

logger = logging.getLogger(__name__)

OVERRIDE_TEMPLATE_NAME = "values.tmpl.yaml"


def combine_trees(dest: dict[str, Any], src: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``src`` into ``dest`` and return ``dest``.

    Only a mapping in ``src`` over a mapping in ``dest`` is merged key by key;
    any other value in ``src`` (scalar, list or null) replaces the one in
    ``dest`` wholesale. Keys only present in ``dest`` are kept.
    """
    for key, value in src.items():
        existing = dest.get(key)
        if isinstance(value, dict) and isinstance(existing, dict):
            combine_trees(existing, value)
        else:
            dest[key] = value
    return dest


def provider_template_path(providers_values_dir: Path, provider: str) -> Path:
    return providers_values_dir / provider / OVERRIDE_TEMPLATE_NAME


def apply_provider_overrides(
    config: RequirementsConfig,
    values_data: bytes,
    providers_values_dir: Path,
    handle: ResolverHandle,
    files: FileService,
    renderer: TemplateRenderer,
    *,
    requirements_file: str = "",
) -> bytes:
    """Render the provider's values template and merge it over the chart values.

    Args:
        config: Requirements config naming the cluster provider.
        values_data: The chart's default values YAML.
        providers_values_dir: Directory containing ``{provider}/values.tmpl.yaml``.
        handle: Version stream handle for the ``versionStream`` function.
        files: File service.
        renderer: Template renderer.
        requirements_file: Where ``config`` came from, for log messages.

    Returns:
        The merged values YAML, or ``values_data`` unchanged when there is no
        provider, no template for it, or the template renders empty.

    Raises:
        VersionStreamError: If the template cannot be checked, rendered or
            parsed, or the values cannot be parsed.
    """
    provider = config.cluster.provider
    if not provider:
        logger.warning(f"No provider in the requirements file {requirements_file or '<none>'}")
        return values_data

    template_file = provider_template_path(providers_values_dir, provider)
    try:
        exists = files.exists(template_file)
    except VersionStreamError as e:
        raise e.wrap(f"failed to check if file exists: {template_file}") from e

    if not exists:
        logger.warning(f"No provider specific values overrides exist in file {template_file}")
        return values_data

    logger.info(f"Applying the kubernetes overrides at {template_file}")

    try:
        values = files.load_values(values_data, source="default helm values")
    except VersionStreamError as e:
        raise e.wrap("failed to unmarshal the default helm values") from e

    params = {
        "Values": to_plain(values),
        "Requirements": config.template_params(),
    }
    try:
        override_data = renderer.render(template_file, params, create_function_map(handle))
    except VersionStreamError as e:
        raise e.wrap(f"failed to load provider specific helm value overrides {template_file}") from e

    if not override_data.strip():
        return values_data

    try:
        overrides = files.load_values(override_data, source=str(template_file))
    except VersionStreamError as e:
        raise e.wrap(f"failed to unmarshal the helm value overrides rendered from {template_file}") from e

    combine_trees(values, overrides)
    return files.dump_values(values)
