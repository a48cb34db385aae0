"""
Tests for provider values overrides: tree merging, template rendering
and the versionStream template function.
"""

from pathlib import Path

import pytest

from conftest import FakeCatalog, write
from helm_versionstream_mcp.errors import ErrorKind, ParseError, RenderError
from helm_versionstream_mcp.helm.functions import VersionStreamFunction, create_function_map
from helm_versionstream_mcp.helm.overrides import apply_provider_overrides, combine_trees
from helm_versionstream_mcp.helm.requirements import RequirementsConfig
from helm_versionstream_mcp.versionstream.resolver import ResolverHandle

BASE_VALUES = b"""\
# default values
ingress:
  domain: example.com
  tls: false
image:
  repository: nginx
  tag: latest
replicas: 1
args:
  - --verbose
"""


def _config(provider: str = "gke") -> RequirementsConfig:
    return RequirementsConfig.model_validate(
        {"cluster": {"provider": provider, "namespace": "jx"}}
    )


class TestCombineTrees:

    def test_empty_override_is_identity(self):
        base = {"a": 1, "b": {"c": [1, 2]}}
        assert combine_trees(dict(base), {}) == base

    def test_base_only_keys_survive(self):
        merged = combine_trees({"a": 1, "b": {"c": 2, "d": 3}}, {"b": {"c": 20}})
        assert merged == {"a": 1, "b": {"c": 20, "d": 3}}

    def test_override_wins_at_depth(self):
        merged = combine_trees(
            {"x": {"y": {"z": 1, "keep": True}}},
            {"x": {"y": {"z": 2, "new": "v"}}},
        )
        assert merged == {"x": {"y": {"z": 2, "keep": True, "new": "v"}}}

    def test_sequences_are_replaced(self):
        merged = combine_trees({"args": [1, 2, 3]}, {"args": [9]})
        assert merged == {"args": [9]}

    def test_scalar_replaces_mapping(self):
        assert combine_trees({"a": {"b": 1}}, {"a": "flat"}) == {"a": "flat"}

    def test_mapping_replaces_scalar(self):
        assert combine_trees({"a": "flat"}, {"a": {"b": 1}}) == {"a": {"b": 1}}

    def test_null_replaces_value(self):
        assert combine_trees({"a": {"b": 1}}, {"a": None}) == {"a": None}


class TestVersionStreamFunction:

    def test_returns_pinned_version(self, handle: ResolverHandle):
        assert VersionStreamFunction(handle)("chart", "stable/nginx") == "1.2.3"

    def test_missing_entry_is_empty(self, handle: ResolverHandle):
        assert VersionStreamFunction(handle)("chart", "stable/unknown") == ""

    def test_lookup_error_is_logged_and_empty(self, handle, catalog: FakeCatalog, caplog):
        catalog.failing.add("stable/nginx")
        assert VersionStreamFunction(handle)("chart", "stable/nginx") == ""
        assert "failed to find chart version for stable/nginx" in caplog.text

    def test_unknown_kind_is_empty(self, handle: ResolverHandle, caplog):
        assert VersionStreamFunction(handle)("helmfile", "stable/nginx") == ""
        assert "unknown version kind" in caplog.text

    def test_function_map(self, handle: ResolverHandle):
        funcs = create_function_map(handle)
        assert isinstance(funcs["versionStream"], VersionStreamFunction)
        assert funcs["quote"]("a") == '"a"'
        assert funcs["default"]("x", "") == "x"
        assert funcs["default"]("x", "y") == "y"


class TestApplyProviderOverrides:

    def _apply(self, tmp_path, handle, files, renderer, config=None, values=BASE_VALUES):
        return apply_provider_overrides(
            config or _config(),
            values,
            tmp_path / "providers",
            handle,
            files,
            renderer,
            requirements_file="jx-requirements.yml",
        )

    def test_no_provider(self, tmp_path, handle, factory, files, renderer, caplog):
        result = self._apply(tmp_path, handle, files, renderer, config=_config(""))
        assert result == BASE_VALUES
        assert "No provider" in caplog.text
        assert factory.calls == []

    def test_no_template_for_provider(self, tmp_path, handle, factory, files, renderer, caplog):
        (tmp_path / "providers" / "eks").mkdir(parents=True)
        result = self._apply(tmp_path, handle, files, renderer)
        assert result == BASE_VALUES
        assert "No provider specific values overrides" in caplog.text
        assert factory.calls == []

    def test_merges_rendered_overrides(self, tmp_path, handle, factory, files, renderer):
        write(tmp_path / "providers" / "gke" / "values.tmpl.yaml", """\
            ingress:
              tls: true
              host: "app.{{ Values.ingress.domain }}"
            image:
              tag: "{{ versionStream('chart', 'stable/nginx') }}"
            provider: {{ Requirements.cluster.provider }}
            args:
              - --quiet
        """)
        result = self._apply(tmp_path, handle, files, renderer)
        merged = files.load_values(result)

        assert merged["ingress"] == {"domain": "example.com", "tls": True, "host": "app.example.com"}
        assert merged["image"] == {"repository": "nginx", "tag": "1.2.3"}
        assert merged["replicas"] == 1
        assert merged["provider"] == "gke"
        assert list(merged["args"]) == ["--quiet"]
        assert b"# default values" in result
        assert factory.calls == [("https://git.example.com/versions.git", "master")]

    def test_failed_lookup_renders_empty(self, tmp_path, handle, catalog, files, renderer):
        catalog.failing.add("stable/nginx")
        write(tmp_path / "providers" / "gke" / "values.tmpl.yaml", """\
            image:
              tag: "{{ versionStream('chart', 'stable/nginx') }}"
        """)
        merged = files.load_values(self._apply(tmp_path, handle, files, renderer))
        assert merged["image"]["tag"] == ""

    def test_empty_render_returns_input(self, tmp_path, handle, files, renderer):
        write(tmp_path / "providers" / "gke" / "values.tmpl.yaml", """\
            {% if Requirements.cluster.provider == "aks" %}
            replicas: 3
            {% endif %}
        """)
        assert self._apply(tmp_path, handle, files, renderer) == BASE_VALUES

    def test_undefined_function_is_render_error(self, tmp_path, handle, files, renderer):
        template = write(tmp_path / "providers" / "gke" / "values.tmpl.yaml", """\
            image:
              tag: "{{ noSuchFunction('x') }}"
        """)
        with pytest.raises(RenderError) as exc:
            self._apply(tmp_path, handle, files, renderer)
        assert exc.value.kind is ErrorKind.RENDER
        assert str(template) in str(exc.value)

    def test_bad_template_syntax_is_render_error(self, tmp_path, handle, files, renderer):
        write(tmp_path / "providers" / "gke" / "values.tmpl.yaml", "a: {{ unclosed\n")
        with pytest.raises(RenderError):
            self._apply(tmp_path, handle, files, renderer)

    def test_function_called_with_wrong_arguments_is_render_error(
        self, tmp_path, handle, files, renderer
    ):
        template = write(tmp_path / "providers" / "gke" / "values.tmpl.yaml", """\
            image:
              tag: "{{ versionStream('chart') }}"
        """)
        with pytest.raises(RenderError) as exc:
            self._apply(tmp_path, handle, files, renderer)
        assert exc.value.kind is ErrorKind.RENDER
        assert str(template) in str(exc.value)
        assert isinstance(exc.value.__cause__.__cause__, TypeError)

    def test_rendered_output_must_parse(self, tmp_path, handle, files, renderer):
        template = write(tmp_path / "providers" / "gke" / "values.tmpl.yaml", """\
            image: [unterminated
        """)
        with pytest.raises(ParseError) as exc:
            self._apply(tmp_path, handle, files, renderer)
        assert str(template) in str(exc.value)

    def test_base_values_must_parse(self, tmp_path, handle, files, renderer):
        write(tmp_path / "providers" / "gke" / "values.tmpl.yaml", "replicas: 2\n")
        with pytest.raises(ParseError) as exc:
            self._apply(tmp_path, handle, files, renderer, values=b"a: [1\n")
        assert "default helm values" in str(exc.value)

    def test_empty_base_values(self, tmp_path, handle, files, renderer):
        write(tmp_path / "providers" / "gke" / "values.tmpl.yaml", "replicas: 2\n")
        result = self._apply(tmp_path, handle, files, renderer, values=b"")
        assert files.load_values(result) == {"replicas": 2}
