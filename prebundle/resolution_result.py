"""Classified outcome of resolving a single specifier."""

from dataclasses import dataclass

from prebundle.models import Namespace, ResolveResponse


@dataclass(frozen=True)
class External:
    """Leave the import in place; the host must not bundle it."""

    target_path: str


@dataclass(frozen=True)
class BrowserStub:
    """Substitute an empty module for a server-only dependency."""

    original_id: str


@dataclass(frozen=True)
class Concrete:
    """A real file on disk (always absolute)."""

    absolute_path: str


@dataclass(frozen=True)
class Unresolved:
    """The underlying resolver missed; the host applies its own default."""


ResolutionResult = External | BrowserStub | Concrete | Unresolved


def to_resolve_response(specifier: str, result: ResolutionResult) -> ResolveResponse | None:
    """Shape a result into the host's resolve contract (None defers to the host)."""
    if isinstance(result, BrowserStub):
        return ResolveResponse(path=specifier, namespace=Namespace.BROWSER_EXTERNAL.value)
    if isinstance(result, External):
        return ResolveResponse(path=result.target_path, external=True)
    if isinstance(result, Concrete):
        return ResolveResponse(path=result.absolute_path)
    return None
