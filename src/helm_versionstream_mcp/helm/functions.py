"""Functions exposed to provider values templates."""

import json
import logging
from collections.abc import Callable
from typing import Any

from helm_versionstream_mcp.errors import VersionStreamError
from helm_versionstream_mcp.versionstream.resolver import ResolverHandle, VersionKind

logger = logging.getLogger(__name__)


class VersionStreamFunction:
    """The ``versionStream`` template function.

    Usage in a template: ``{{ versionStream("chart", "stable/nginx") }}``.
    A failed lookup is logged and renders as an empty string so one bad
    entry cannot fail the whole overlay.
    """

    def __init__(self, handle: ResolverHandle) -> None:
        self._handle = handle

    def __call__(self, kind: str, name: str) -> str:
        try:
            return self._handle.get().stable_version(VersionKind.parse(kind), name)
        except VersionStreamError as e:
            logger.error(f"failed to find {kind} version for {name} in the version stream due to: {e}")
            return ""


def _to_yaml(value: Any) -> str:
    # JSON is valid YAML and keeps the output on one line
    return json.dumps(value)


def _quote(value: Any) -> str:
    return json.dumps("" if value is None else str(value))


def _default(fallback: Any, value: Any = None) -> Any:
    return value if value not in (None, "", [], {}) else fallback


def create_function_map(handle: ResolverHandle) -> dict[str, Callable[..., Any]]:
    """Build the function table for rendering values templates."""
    return {
        "toYaml": _to_yaml,
        "quote": _quote,
        "default": _default,
        "versionStream": VersionStreamFunction(handle),
    }
