"""Dual-strategy specifier resolution for the pre-bundle pass."""

import logging
from pathlib import Path

from prebundle.entry_registry import EntryRegistry
from prebundle.models import ImportKind
from prebundle.node_resolver import BROWSER_EXTERNAL_ID, ModuleResolver
from prebundle.path_utils import is_external_url, normalize_path
from prebundle.resolution_result import (
    BrowserStub,
    Concrete,
    External,
    ResolutionResult,
    Unresolved,
)

logger = logging.getLogger(__name__)


class SpecifierResolver:
    """Pick the ESM or require strategy per import and classify the outcome.

    Both strategies are injected and shared read-only; a lookup never writes
    state here, so concurrent events can call `resolve` freely.
    """

    def __init__(
        self,
        esm_resolver: ModuleResolver,
        require_resolver: ModuleResolver,
        registry: EntryRegistry,
        *,
        ssr: bool = False,
    ):
        self.esm_resolver = esm_resolver
        self.require_resolver = require_resolver
        self.registry = registry
        self.ssr = ssr

    def strategy_for(self, kind: ImportKind) -> ModuleResolver:
        return self.require_resolver if kind.is_require else self.esm_resolver

    def effective_importer(self, importer: str | None, resolve_dir: str | None = None) -> str:
        """Location relative imports are resolved from."""
        if resolve_dir:
            # only set for top-level entries under the archive install mode
            return normalize_path(str(Path(resolve_dir) / "*"))
        if not importer:
            return ""
        return self.registry.importer_path(importer)

    def resolve_raw(
        self,
        specifier: str,
        importer: str | None,
        kind: ImportKind,
        resolve_dir: str | None = None,
    ) -> str | None:
        """Run the underlying strategy without classifying its answer."""
        resolver = self.strategy_for(kind)
        return resolver.resolve(
            specifier, self.effective_importer(importer, resolve_dir) or None, ssr=self.ssr
        )

    def resolve(
        self,
        specifier: str,
        importer: str | None,
        kind: ImportKind,
        resolve_dir: str | None = None,
    ) -> ResolutionResult:
        resolved = self.resolve_raw(specifier, importer, kind, resolve_dir)
        if not resolved:
            logger.debug(f"Unresolved: {specifier} (importer={importer!r}, kind={kind.value})")
            return Unresolved()
        return classify(specifier, resolved)


def classify(specifier: str, resolved: str) -> ResolutionResult:
    """Turn a raw resolver answer into one of the result variants."""
    if resolved.startswith(BROWSER_EXTERNAL_ID):
        return BrowserStub(specifier)
    if is_external_url(resolved):
        return External(resolved)
    return Concrete(str(Path(resolved).resolve()))
