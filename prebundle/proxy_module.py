"""Synthesis of re-export proxy modules for pre-bundle entries.

The host bundles each entry through a proxy rather than the entry file itself.
The proxy carries the entry's flattened id, while the real file is reached
only through a relative import. If the entry file were loaded directly, any
relative import of the same file from inside the dependency would produce a
second copy of it in the output.
"""

import logging
import os
from dataclasses import dataclass

from prebundle.errors import MalformedMetadataError
from prebundle.loader_for import loader_for
from prebundle.models import ExportsData
from prebundle.path_utils import normalize_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProxyModule:
    contents: str
    loader: str


def relative_import_path(entry_path: str, root: str) -> str:
    """Path of the entry relative to root, always usable as an import specifier."""
    relative = normalize_path(os.path.relpath(entry_path, root))
    if not relative.startswith(("./", "../")) and relative != ".":
        relative = f"./{relative}"
    return relative


def synthesize_proxy(
    entry_id: str,
    entry_path: str | None,
    exports: ExportsData | None,
    root: str,
) -> ProxyModule:
    """Generate the proxy source for one entry.

    Raises MalformedMetadataError instead of emitting a guess when the entry
    has no file or no scanned metadata.
    """
    if not entry_path:
        raise MalformedMetadataError(entry_id, "no entry file is registered")
    if exports is None:
        raise MalformedMetadataError(entry_id, "no export metadata was scanned")

    relative = relative_import_path(entry_path, root)

    contents = ""
    if exports.is_commonjs:
        contents += f'export default require("{relative}");'
    else:
        if "default" in exports.exports:
            contents += f'import d from "{relative}";export default d;'
        if (
            exports.has_reexports
            or len(exports.exports) > 1
            or (exports.exports[0] if exports.exports else None) != "default"
        ):
            contents += f'\nexport * from "{relative}"'

    logger.debug(f"Proxy for {entry_id} -> {relative}")
    return ProxyModule(contents=contents, loader=loader_for(entry_path))
