"""Tests for the resolve/load event dispatcher."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from prebundle.dep_plugin import DepPrebundlePlugin
from prebundle.entry_registry import EntryRegistry
from prebundle.errors import MalformedMetadataError
from prebundle.exports_index import ExportsIndex
from prebundle.models import ExportsData, ImportKind, LoadArgs, ResolveArgs


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project root with a couple of installed packages."""
    root = tmp_path.resolve()
    for name, manifest, files in [
        ("react", {"name": "react", "main": "index.js"}, {"index.js": "module.exports = {}"}),
        (
            "@scope/lib",
            {"name": "@scope/lib", "module": "es/index.mjs"},
            {"es/index.mjs": "export default 1", "style.css": "a{}"},
        ),
        ("lodash", {"name": "lodash"}, {"index.js": ""}),
    ]:
        pkg_dir = root / "node_modules" / name
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "package.json").write_text(json.dumps(manifest))
        for rel, content in files.items():
            (pkg_dir / rel).parent.mkdir(parents=True, exist_ok=True)
            (pkg_dir / rel).write_text(content)
    (root / "src").mkdir()
    (root / "src" / "theme.css").write_text("")
    return root


@pytest.fixture
def plugin(project: Path) -> DepPrebundlePlugin:
    registry = EntryRegistry(
        {
            "react": str(project / "node_modules" / "react" / "index.js"),
            "@scope_lib": str(project / "node_modules" / "@scope" / "lib" / "es" / "index.mjs"),
        },
        exclude=["lodash"],
    )
    exports = ExportsIndex(
        {
            "react": ExportsData(),
            "@scope_lib": ExportsData(exports=("default", "helper")),
        }
    )
    return DepPrebundlePlugin(
        registry, exports, {"root": str(project), "alias": {"my-react": "react"}}, pnp=False
    )


def test_root_entry_resolves_to_dep_namespace(plugin: DepPrebundlePlugin) -> None:
    """Verify a root lookup of a registered entry returns its flattened id."""
    response = plugin.on_resolve(ResolveArgs(path="@scope/lib", kind=ImportKind.ENTRY_POINT))
    assert response is not None
    assert response.path == "@scope_lib"
    assert response.namespace == "dep"
    assert not response.external


def test_aliased_entry_resolves_to_dep_namespace(plugin: DepPrebundlePlugin) -> None:
    """Verify an alias that points at an entry also yields the dep namespace."""
    response = plugin.on_resolve(ResolveArgs(path="my-react", kind=ImportKind.ENTRY_POINT))
    assert response is not None
    assert (response.path, response.namespace) == ("react", "dep")


def test_entry_with_importer_resolves_to_disk(
    plugin: DepPrebundlePlugin, project: Path
) -> None:
    """Verify entries imported from other modules resolve to real files."""
    response = plugin.on_resolve(
        ResolveArgs(path="react", importer="@scope_lib", kind=ImportKind.IMPORT_STATEMENT)
    )
    assert response is not None
    assert response.path == str(project / "node_modules" / "react" / "index.js")
    assert response.namespace is None


def test_excluded_is_external(plugin: DepPrebundlePlugin) -> None:
    """Verify excluded packages are external even though they exist on disk."""
    for spec in ("lodash", "lodash/merge"):
        response = plugin.on_resolve(ResolveArgs(path=spec, importer="react"))
        assert response is not None
        assert response.external
        assert response.path == spec


def test_external_types_never_concrete(plugin: DepPrebundlePlugin, project: Path) -> None:
    """Verify styles are externalized whether or not the file exists."""
    present = plugin.on_resolve(ResolveArgs(path="@scope/lib/style.css", importer="@scope_lib"))
    assert present is not None
    assert present.external
    assert present.path == str(project / "node_modules" / "@scope" / "lib" / "style.css")

    importer = str(project / "src" / "main.js")
    relative = plugin.on_resolve(ResolveArgs(path="./theme.css", importer=importer))
    assert relative is not None and relative.external

    missing = plugin.on_resolve(ResolveArgs(path="./ghost.scss", importer=importer))
    assert missing is not None
    assert missing.external
    assert missing.path == "./ghost.scss"


def test_builtin_is_browser_external(plugin: DepPrebundlePlugin) -> None:
    """Verify Node built-ins route to the browser-external namespace."""
    response = plugin.on_resolve(ResolveArgs(path="fs", importer="react"))
    assert response is not None
    assert response.to_dict() == {"path": "fs", "namespace": "browser-external"}


def test_unresolved_defers_to_host(plugin: DepPrebundlePlugin) -> None:
    """Verify unknown bare specifiers and relative paths return nothing."""
    assert plugin.on_resolve(ResolveArgs(path="not-installed", importer="react")) is None
    assert plugin.on_resolve(ResolveArgs(path="./local.js", importer="react")) is None


def test_load_dep_synthesizes_proxy(plugin: DepPrebundlePlugin, project: Path) -> None:
    """Verify dep loads return proxy source resolved from the root."""
    response = plugin.on_load(LoadArgs(path="@scope_lib", namespace="dep"))
    assert response is not None
    assert response.loader == "js"
    assert response.resolve_dir == str(project)
    assert response.contents == (
        'import d from "./node_modules/@scope/lib/es/index.mjs";export default d;'
        '\nexport * from "./node_modules/@scope/lib/es/index.mjs"'
    )

    cjs = plugin.on_load(LoadArgs(path="react", namespace="dep"))
    assert cjs is not None
    assert cjs.contents == 'export default require("./node_modules/react/index.js");'


def test_load_dep_without_metadata_fails(project: Path) -> None:
    """Verify a registered entry without metadata is a hard failure."""
    plugin = DepPrebundlePlugin(
        EntryRegistry({"react": str(project / "node_modules" / "react" / "index.js")}),
        ExportsIndex({}),
        {"root": str(project)},
        pnp=False,
    )
    with pytest.raises(MalformedMetadataError):
        plugin.on_load(LoadArgs(path="react", namespace="dep"))


def test_browser_external_load_is_empty(plugin: DepPrebundlePlugin) -> None:
    """Verify browser-external loads are always empty."""
    for path in ("fs", "/does/not/matter.js", ""):
        response = plugin.on_load(LoadArgs(path=path, namespace="browser-external"))
        assert response is not None
        assert response.contents == ""


def test_default_namespace_load_is_left_to_host(plugin: DepPrebundlePlugin) -> None:
    """Verify ordinary files are loaded by the host when the fallback is off."""
    assert plugin.on_load(LoadArgs(path="/abs/file.js", namespace="default")) is None


def test_injected_strategies_by_kind(project: Path) -> None:
    """Verify require-style imports reach the require strategy."""
    esm, req = MagicMock(), MagicMock()
    esm.resolve.return_value = None
    req.resolve.return_value = str(project / "node_modules" / "react" / "index.js")
    plugin = DepPrebundlePlugin(
        EntryRegistry({}),
        ExportsIndex({}),
        {"root": str(project)},
        esm_resolver=esm,
        require_resolver=req,
        pnp=False,
    )
    response = plugin.on_resolve(
        ResolveArgs(path="react", importer="/x.js", kind=ImportKind.REQUIRE_CALL)
    )
    assert response is not None
    assert response.path.endswith("index.js")
    assert plugin.on_resolve(ResolveArgs(path="react", importer="/x.js")) is None


def test_setup_registers_handlers(plugin: DepPrebundlePlugin) -> None:
    """Verify setup hands both callbacks to the host."""
    build = MagicMock()
    plugin.setup(build)
    build.on_resolve.assert_called_once_with(plugin.on_resolve)
    build.on_load.assert_called_once_with(plugin.on_load)


def test_pnp_auto_detection(project: Path) -> None:
    """Verify the archive fallback turns on when a loader manifest exists."""
    args = (EntryRegistry({}), ExportsIndex({}))
    assert DepPrebundlePlugin(*args, {"root": str(project)}).fallback is None
    (project / ".pnp.cjs").write_text("")
    plugin = DepPrebundlePlugin(*args, {"root": str(project)})
    assert plugin.fallback is not None
    assert [r.name for r in plugin.resolve_rules][-1] == "pnp"
