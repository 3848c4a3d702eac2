"""Node-style module resolution used as the default underlying resolver.

The pre-bundle core only needs a callable that turns a specifier plus an
importer into a path; this module provides one that understands aliases,
relative and absolute paths, `node_modules` lookup, `package.json` entry
fields and conditional `exports`. Two instances are created per run: one that
prefers ESM builds and one that prefers CommonJS (`require`) builds.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from prebundle.path_utils import is_external_url

logger = logging.getLogger(__name__)

BROWSER_EXTERNAL_ID = "__vite-browser-external"

ESM_EXTENSIONS: tuple[str, ...] = (".mjs", ".js", ".mts", ".ts", ".jsx", ".tsx", ".json")
REQUIRE_EXTENSIONS: tuple[str, ...] = (".cjs", ".js", ".cts", ".ts", ".jsx", ".tsx", ".json")

NODE_BUILTIN_MODULES = frozenset(
    {
        "assert",
        "async_hooks",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "diagnostics_channel",
        "dns",
        "domain",
        "events",
        "fs",
        "http",
        "http2",
        "https",
        "inspector",
        "module",
        "net",
        "os",
        "path",
        "perf_hooks",
        "process",
        "punycode",
        "querystring",
        "readline",
        "repl",
        "stream",
        "string_decoder",
        "sys",
        "timers",
        "tls",
        "trace_events",
        "tty",
        "url",
        "util",
        "v8",
        "vm",
        "wasi",
        "worker_threads",
        "zlib",
    }
)


class ModuleResolver(Protocol):
    """Signature every underlying resolver strategy must satisfy."""

    def resolve(
        self,
        specifier: str,
        importer: str | None = None,
        *,
        alias_only: bool = False,
        ssr: bool = False,
    ) -> str | None: ...


def is_builtin(specifier: str) -> bool:
    """Check if a specifier names a Node.js core module."""
    if specifier.startswith("node:"):
        return True
    return specifier.split("/")[0] in NODE_BUILTIN_MODULES


def split_package_name(specifier: str) -> tuple[str, str]:
    """Split `@scope/pkg/sub/file` into (`@scope/pkg`, `sub/file`)."""
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2]), "/".join(parts[2:])
    return parts[0], "/".join(parts[1:])


class NodeResolver:
    """Resolve specifiers the way Node (or an ESM-aware bundler) would."""

    def __init__(
        self,
        root: str | Path,
        *,
        prefer_require: bool = False,
        alias: Mapping[str, str] | None = None,
    ):
        self.root = Path(root).resolve()
        self.prefer_require = prefer_require
        self.alias: dict[str, str] = dict(alias or {})
        self.extensions = REQUIRE_EXTENSIONS if prefer_require else ESM_EXTENSIONS

    def resolve(
        self,
        specifier: str,
        importer: str | None = None,
        *,
        alias_only: bool = False,
        ssr: bool = False,
    ) -> str | None:
        aliased = self.apply_alias(specifier)
        if alias_only:
            return aliased
        if aliased is not None:
            logger.debug(f"Alias {specifier} -> {aliased}")
            specifier = aliased

        if is_external_url(specifier):
            return specifier

        base_dir = self._base_dir(importer)
        if specifier in (".", "..") or specifier.startswith(("./", "../")):
            return self._resolve_file_or_dir(base_dir / specifier)
        if Path(specifier).is_absolute():
            return self._resolve_file_or_dir(Path(specifier))

        if not ssr and self._browser_disabled(base_dir, specifier):
            return f"{BROWSER_EXTERNAL_ID}:{specifier}"
        if is_builtin(specifier):
            if ssr:
                return None
            return f"{BROWSER_EXTERNAL_ID}:{specifier}"

        return self._resolve_bare(specifier, base_dir, ssr)

    def apply_alias(self, specifier: str) -> str | None:
        """Return the aliased specifier, or None when no alias applies."""
        for find, replacement in self.alias.items():
            if specifier == find or specifier.startswith(f"{find}/"):
                return replacement + specifier[len(find) :]
        return None

    def conditions(self, ssr: bool) -> tuple[str, ...]:
        kind = "require" if self.prefer_require else "import"
        if ssr:
            return (kind, "node", "default")
        return ("browser", kind, "default")

    def _base_dir(self, importer: str | None) -> Path:
        if not importer:
            return self.root
        return Path(importer).parent

    def _resolve_file_or_dir(self, target: Path) -> str | None:
        hit = self._resolve_file(target)
        if hit:
            return hit
        if target.is_dir():
            data = read_package_json(target)
            if data is not None:
                fields = ("main",) if self.prefer_require else ("module", "main")
                for field in fields:
                    value = data.get(field)
                    if isinstance(value, str):
                        hit = self._resolve_file(target / value)
                        if hit:
                            return hit
            return self._resolve_file(target / "index")
        return None

    def _resolve_file(self, target: Path) -> str | None:
        if not target.name:
            return None
        if target.is_file():
            return str(target)
        for ext in self.extensions:
            candidate = target.with_name(target.name + ext)
            if candidate.is_file():
                return str(candidate)
        return None

    def _resolve_bare(self, specifier: str, base_dir: Path, ssr: bool) -> str | None:
        name, subpath = split_package_name(specifier)
        for directory in (base_dir, *base_dir.parents):
            pkg_dir = directory / "node_modules" / name
            if pkg_dir.is_dir():
                return self._resolve_package(pkg_dir, subpath, ssr)
        logger.debug(f"No node_modules entry for {specifier} from {base_dir}")
        return None

    def _resolve_package(self, pkg_dir: Path, subpath: str, ssr: bool) -> str | None:
        data = read_package_json(pkg_dir) or {}

        if "exports" in data:
            key = f"./{subpath}" if subpath else "."
            target = resolve_exports(data["exports"], key, self.conditions(ssr))
            if target is None:
                # exports encapsulate the package: nothing else is reachable
                return None
            return self._resolve_file(pkg_dir / target)

        if subpath:
            return self._resolve_file_or_dir(pkg_dir / subpath)

        fields = ["main"]
        if not self.prefer_require:
            fields.insert(0, "module")
        if not ssr:
            fields.insert(0, "browser")
        for field in fields:
            value = data.get(field)
            if isinstance(value, str):
                hit = self._resolve_file_or_dir(pkg_dir / value)
                if hit:
                    return hit
        return self._resolve_file(pkg_dir / "index")

    def _browser_disabled(self, base_dir: Path, specifier: str) -> bool:
        """Check the importer's own package for a `browser: {id: false}` entry."""
        for directory in (base_dir, *base_dir.parents):
            data = read_package_json(directory)
            if data is None:
                continue
            browser = data.get("browser")
            return isinstance(browser, dict) and browser.get(specifier) is False
        return False


def read_package_json(directory: Path) -> dict[str, Any] | None:
    """Read `package.json` in a directory; malformed JSON propagates."""
    pkg = directory / "package.json"
    if not pkg.is_file():
        return None
    data = json.loads(pkg.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {}


def resolve_exports(exports: Any, subpath: str, conditions: tuple[str, ...]) -> str | None:
    """Pick the target for a subpath out of a package's `exports` field."""
    if isinstance(exports, (str, list)) or (
        isinstance(exports, dict) and not any(k.startswith(".") for k in exports)
    ):
        exports = {".": exports}
    if not isinstance(exports, dict):
        return None

    if subpath in exports:
        return _resolve_conditions(exports[subpath], conditions)

    for key, value in exports.items():
        if "*" not in key:
            continue
        prefix, suffix = key.split("*", 1)
        if (
            subpath.startswith(prefix)
            and subpath.endswith(suffix)
            and len(subpath) >= len(prefix) + len(suffix)
        ):
            match = subpath[len(prefix) : len(subpath) - len(suffix)]
            target = _resolve_conditions(value, conditions)
            if target is not None:
                return target.replace("*", match)
    return None


def _resolve_conditions(value: Any, conditions: tuple[str, ...]) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        for item in value:
            target = _resolve_conditions(item, conditions)
            if target is not None:
                return target
        return None
    if isinstance(value, dict):
        # Node semantics: object key order decides, not our condition order
        for key, nested in value.items():
            if key in conditions:
                target = _resolve_conditions(nested, conditions)
                if target is not None:
                    return target
    return None
