"""Utility for turning a package specifier into a single opaque key."""

import re

NESTED_MARKER_RE = re.compile(r"\s*>\s*")


def flatten_id(specifier: str) -> str:
    """Flatten a specifier into a filename-safe id.

    `@scope/pkg/sub` -> `@scope_pkg_sub`, `lodash.merge` -> `lodash__merge`,
    `a > b` (nested dependency) -> `a___b`.
    """
    flat = specifier.replace("/", "_").replace(":", "_")
    flat = flat.replace(".", "__")
    return NESTED_MARKER_RE.sub("___", flat)
