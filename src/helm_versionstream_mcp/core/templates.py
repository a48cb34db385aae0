"""Jinja2 rendering of values templates."""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from helm_versionstream_mcp.errors import RenderError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders YAML templates such as ``values.tmpl.yaml``.

    Undefined variables and functions fail the render instead of silently
    producing empty output.
    """

    def render(
        self,
        path: Path,
        params: Mapping[str, Any],
        funcs: Mapping[str, Callable[..., Any]],
    ) -> bytes:
        """Render a template file.

        Args:
            path: Template file.
            params: Context variables available to the template.
            funcs: Functions available to the template, by name.

        Returns:
            The rendered output as UTF-8 bytes.

        Raises:
            RenderError: If the template cannot be loaded, parsed or executed.
        """
        env = Environment(
            loader=FileSystemLoader(str(path.parent)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        env.globals.update(funcs)

        try:
            template = env.get_template(path.name)
            output = template.render(**params)
        except Exception as e:
            # TemplateError, or anything a template function raises such as a TypeError
            raise RenderError(f"failed to render template {path}: {e}") from e

        logger.debug(f"Rendered {path} ({len(output)} chars)")
        return output.encode("utf-8")
