"""Event dispatcher answering the host engine's resolve and load events."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from prebundle.entry_registry import EntryRegistry
from prebundle.exports_index import ExportsIndex
from prebundle.external_types import external_types_pattern, is_external_type
from prebundle.models import LoadArgs, LoadResponse, Namespace, ResolveArgs, ResolveResponse
from prebundle.node_resolver import ModuleResolver, NodeResolver
from prebundle.path_utils import is_bare_specifier
from prebundle.pnp_fallback import PnpFallback, is_running_with_pnp
from prebundle.proxy_module import synthesize_proxy
from prebundle.resolution_result import External, to_resolve_response
from prebundle.specifier_resolver import SpecifierResolver

logger = logging.getLogger(__name__)

PLUGIN_NAME = "dep-pre-bundle"


def _any_specifier(_: str) -> bool:
    return True


@dataclass(frozen=True)
class ResolveRule:
    """One row of the resolve table; `namespace=None` matches every namespace."""

    name: str
    matches: Callable[[str], bool]
    handler: Callable[[ResolveArgs], ResolveResponse | None]
    namespace: str | None = None

    def applies(self, args: ResolveArgs) -> bool:
        if self.namespace is not None and self.namespace != args.namespace:
            return False
        return self.matches(args.path)


@dataclass(frozen=True)
class LoadRule:
    name: str
    handler: Callable[[LoadArgs], LoadResponse | None]
    namespace: str | None = None

    def applies(self, args: LoadArgs) -> bool:
        return self.namespace is None or self.namespace == args.namespace


class HostBuild(Protocol):
    """Registration surface of the host bundling engine."""

    def on_resolve(self, callback: Callable[[ResolveArgs], ResolveResponse | None]) -> None: ...

    def on_load(self, callback: Callable[[LoadArgs], LoadResponse | None]) -> None: ...


class DepPrebundlePlugin:
    """Route resolve/load events to the filter, registry, resolver and synthesizer.

    Rules are tried in a fixed order and the first non-None answer wins; a
    None from every rule lets the host fall back to its own resolution.
    All state is built once in the constructor and only read afterwards.
    """

    name = PLUGIN_NAME

    def __init__(
        self,
        registry: EntryRegistry,
        exports: ExportsIndex,
        config: dict[str, Any],
        *,
        esm_resolver: ModuleResolver | None = None,
        require_resolver: ModuleResolver | None = None,
        pnp: bool | None = None,
    ):
        self.registry = registry
        self.exports = exports
        self.root = str(Path(config.get("root") or ".").resolve())
        alias = config.get("alias") or {}

        self.esm_resolver = esm_resolver or NodeResolver(self.root, alias=alias)
        self.require_resolver = require_resolver or NodeResolver(
            self.root, prefer_require=True, alias=alias
        )
        self.resolver = SpecifierResolver(
            self.esm_resolver,
            self.require_resolver,
            registry,
            ssr=bool(config.get("ssr", False)),
        )
        self.external_pattern = external_types_pattern(config.get("assets_include"))

        if pnp is None:
            pnp_setting = config.get("pnp", "auto")
            pnp = is_running_with_pnp(self.root) if pnp_setting == "auto" else bool(pnp_setting)
        self.fallback = PnpFallback(self.resolver) if pnp else None

        self.resolve_rules = self._build_resolve_rules()
        self.load_rules = self._build_load_rules()

    def _build_resolve_rules(self) -> list[ResolveRule]:
        rules = [
            ResolveRule("exclude", self._is_excluded, self._resolve_excluded),
            ResolveRule("external-type", self._is_external_type, self._resolve_external_type),
            ResolveRule("bare", is_bare_specifier, self._resolve_bare),
        ]
        if self.fallback is not None:
            rules.append(ResolveRule("pnp", _any_specifier, self.fallback.on_resolve))
        return rules

    def _build_load_rules(self) -> list[LoadRule]:
        rules = [
            LoadRule("dep", self._load_dep, Namespace.DEP.value),
            LoadRule(
                "browser-external",
                self._load_browser_external,
                Namespace.BROWSER_EXTERNAL.value,
            ),
        ]
        if self.fallback is not None:
            rules.append(LoadRule("pnp", self.fallback.on_load))
        return rules

    def setup(self, build: HostBuild) -> None:
        build.on_resolve(self.on_resolve)
        build.on_load(self.on_load)

    def on_resolve(self, args: ResolveArgs) -> ResolveResponse | None:
        for rule in self.resolve_rules:
            if not rule.applies(args):
                continue
            response = rule.handler(args)
            if response is not None:
                logger.debug(f"[{rule.name}] {args.path} -> {response}")
                return response
        return None

    def on_load(self, args: LoadArgs) -> LoadResponse | None:
        for rule in self.load_rules:
            if rule.applies(args):
                response = rule.handler(args)
                if response is not None:
                    return response
        return None

    # -----------------------------
    # Resolve handlers
    # -----------------------------

    def _is_excluded(self, specifier: str) -> bool:
        return is_bare_specifier(specifier) and self.registry.is_excluded(specifier)

    def _resolve_excluded(self, args: ResolveArgs) -> ResolveResponse | None:
        return to_resolve_response(args.path, External(args.path))

    def _is_external_type(self, specifier: str) -> bool:
        return is_external_type(specifier, self.external_pattern)

    def _resolve_external_type(self, args: ResolveArgs) -> ResolveResponse | None:
        resolved = self.resolver.resolve_raw(args.path, args.importer, args.kind)
        # externalized whether or not the file exists
        return to_resolve_response(args.path, External(resolved or args.path))

    def _resolve_entry(self, specifier: str) -> ResolveResponse | None:
        flat_id = self.registry.entry_for(specifier)
        if flat_id is None:
            return None
        return ResolveResponse(path=flat_id, namespace=Namespace.DEP.value)

    def _resolve_bare(self, args: ResolveArgs) -> ResolveResponse | None:
        if not args.importer:
            entry = self._resolve_entry(args.path)
            if entry:
                return entry
            aliased = self.esm_resolver.resolve(args.path, None, alias_only=True)
            if aliased:
                entry = self._resolve_entry(aliased)
                if entry:
                    return entry

        result = self.resolver.resolve(args.path, args.importer, args.kind)
        return to_resolve_response(args.path, result)

    # -----------------------------
    # Load handlers
    # -----------------------------

    def _load_dep(self, args: LoadArgs) -> LoadResponse:
        proxy = synthesize_proxy(
            args.path,
            self.registry.path_of(args.path),
            self.exports.get(args.path),
            self.root,
        )
        return LoadResponse(contents=proxy.contents, loader=proxy.loader, resolve_dir=self.root)

    def _load_browser_external(self, args: LoadArgs) -> LoadResponse:
        # the host turns an empty ES module into an empty CommonJS stub
        return LoadResponse(contents="")
