"""Utility for deriving the host loader hint from a file name."""

from pathlib import Path

# Extensions the host does not recognize by name, mapped to a loader it does.
LOADER_ALIASES = {"mjs": "js"}


def loader_for(path: str) -> str:
    """Return the loader hint for a file (`mjs` is loaded as `js`)."""
    ext = Path(path).suffix[1:]
    return LOADER_ALIASES.get(ext, ext)
