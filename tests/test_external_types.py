"""Tests for the externalization filter."""

import pytest

from prebundle.external_types import external_types_pattern, is_external_type


@pytest.mark.parametrize(
    "specifier",
    [
        "pkg/style.css",
        "./theme.scss",
        "comp/App.vue",
        "ui/Button.jsx",
        "icons/logo.svg",
        "fonts/inter.woff2",
        "pkg/style.css?inline",
    ],
)
def test_external_types_match(specifier: str) -> None:
    """Verify styles, SFCs, JSX and known assets are externalized."""
    assert is_external_type(specifier)


@pytest.mark.parametrize(
    "specifier", ["react", "./index.js", "lodash/merge.mjs", "pkg/css", "a.css.js"]
)
def test_plain_modules_fall_through(specifier: str) -> None:
    """Verify JavaScript modules are not treated as external types."""
    assert not is_external_type(specifier)


def test_configured_assets_extend_pattern() -> None:
    """Verify extra asset extensions can be configured."""
    pattern = external_types_pattern([".glb", "hdr"])
    assert is_external_type("models/scene.glb", pattern)
    assert is_external_type("env/sky.hdr?url", pattern)
    assert not is_external_type("models/scene.glb")
