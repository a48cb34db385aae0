"""Namespace scoped ``--set`` values for helm installs."""

import re


def to_camel_case(text: str) -> str:
    """Upper camel case a dash or underscore separated string.

    ``"prod-eu-west"`` becomes ``"ProdEuWest"``. Only the first letter of each
    segment is changed, so ``"myApp"`` becomes ``"MyApp"`` and already camel
    cased input is returned unchanged.
    """
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_]", text))


def namespace_overrides(namespace: str) -> tuple[list[str], list[str]]:
    """Return the tag/global flags and the simplified global value for a namespace."""
    return [
        f"tags.jx-ns-{namespace}=true",
        f"global.jxNs{to_camel_case(namespace)}=true",
    ], [
        f"global.jxNs={namespace}",
    ]
