"""Data models exchanged with the host bundling engine."""

from dataclasses import dataclass
from enum import Enum


class ImportKind(str, Enum):
    """How the importing code referenced a specifier."""

    ENTRY_POINT = "entry-point"
    IMPORT_STATEMENT = "import-statement"
    REQUIRE_CALL = "require-call"
    DYNAMIC_IMPORT = "dynamic-import"
    REQUIRE_RESOLVE = "require-resolve"
    IMPORT_RULE = "import-rule"
    URL_TOKEN = "url-token"

    @property
    def is_require(self) -> bool:
        return self.value.startswith("require")


class Namespace(str, Enum):
    """Tag routing a resolved module to its load handler."""

    DEFAULT = "default"
    DEP = "dep"
    BROWSER_EXTERNAL = "browser-external"


@dataclass(frozen=True)
class ExportsData:
    """Statically scanned export metadata for one entry."""

    imports: tuple[str, ...] = ()
    exports: tuple[str, ...] = ()
    has_reexports: bool = False

    @property
    def is_commonjs(self) -> bool:
        # No ES syntax at all: treat as module.exports-style
        return not self.imports and not self.exports


@dataclass(frozen=True)
class ResolveArgs:
    """A resolve event as emitted by the host."""

    path: str
    importer: str = ""
    kind: ImportKind = ImportKind.IMPORT_STATEMENT
    namespace: str = Namespace.DEFAULT.value
    resolve_dir: str | None = None


@dataclass(frozen=True)
class LoadArgs:
    """A load event as emitted by the host."""

    path: str
    namespace: str = Namespace.DEFAULT.value


@dataclass(frozen=True)
class ResolveResponse:
    path: str
    external: bool = False
    namespace: str | None = None

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {"path": self.path}
        if self.external:
            out["external"] = True
        if self.namespace:
            out["namespace"] = self.namespace
        return out


@dataclass(frozen=True)
class LoadResponse:
    contents: str | bytes
    loader: str | None = None
    resolve_dir: str | None = None

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {"contents": self.contents}
        if self.loader:
            out["loader"] = self.loader
        if self.resolve_dir:
            out["resolveDir"] = self.resolve_dir
        return out
