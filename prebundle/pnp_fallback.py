"""Resolve/load handlers for installs that keep packages inside zip archives.

Under this install strategy packages are not plain directories, so relative
resolution from a virtual entry needs the entry's resolve directory, and file
contents have to be read through the archive.
"""

import logging
import re
import zipfile
from collections.abc import Callable
from pathlib import Path

from prebundle.models import LoadArgs, LoadResponse, Namespace, ResolveArgs, ResolveResponse
from prebundle.path_utils import normalize_path
from prebundle.resolution_result import to_resolve_response
from prebundle.specifier_resolver import SpecifierResolver

logger = logging.getLogger(__name__)

PNP_MANIFESTS = (".pnp.cjs", ".pnp.js")
ARCHIVE_SEGMENT_RE = re.compile(r"^(.*?\.zip)/(.+)$")


def is_running_with_pnp(root: str | Path) -> bool:
    """Detect a zip-archive install by its loader manifest in the project root."""
    root = Path(root)
    return any((root / name).is_file() for name in PNP_MANIFESTS)


def read_archive_bytes(path: str) -> bytes:
    """Read a file that may live inside a `.zip` package archive."""
    match = ARCHIVE_SEGMENT_RE.match(normalize_path(path))
    if match is None or not Path(match.group(1)).is_file():
        return Path(path).read_bytes()

    archive, member = match.groups()
    with zipfile.ZipFile(archive) as zf:
        try:
            return zf.read(member)
        except KeyError as e:
            raise FileNotFoundError(f"{member} not found in archive {archive}") from e


class PnpFallback:
    def __init__(
        self,
        resolver: SpecifierResolver,
        read_bytes: Callable[[str], bytes] = read_archive_bytes,
    ):
        self.resolver = resolver
        self.read_bytes = read_bytes

    def on_resolve(self, args: ResolveArgs) -> ResolveResponse | None:
        # pass along resolveDir for entries
        resolve_dir = args.resolve_dir if args.namespace == Namespace.DEP.value else None
        result = self.resolver.resolve(args.path, args.importer, args.kind, resolve_dir)
        return to_resolve_response(args.path, result)

    def on_load(self, args: LoadArgs) -> LoadResponse:
        logger.debug(f"Reading {args.path} through archive fallback")
        return LoadResponse(contents=self.read_bytes(args.path), loader="default")
