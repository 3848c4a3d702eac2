"""Small path and specifier helpers shared by the resolver and the plugin."""

import posixpath
import re
from collections.abc import Iterable

EXTERNAL_URL_RE = re.compile(r"^(https?:)?//")
BARE_SPECIFIER_RE = re.compile(r"^[\w@][^:]")


def normalize_path(path: str) -> str:
    """Use forward slashes and collapse `.`/`..` segments."""
    return posixpath.normpath(path.replace("\\", "/"))


def is_external_url(url: str) -> bool:
    return EXTERNAL_URL_RE.match(url) is not None


def is_bare_specifier(specifier: str) -> bool:
    """True for package-style specifiers (`vue`, `@scope/pkg`), not paths or URLs."""
    return BARE_SPECIFIER_RE.match(specifier) is not None


def module_list_contains(module_list: Iterable[str] | None, specifier: str) -> bool:
    """Check whether a specifier (or a deep import of it) is listed."""
    if not module_list:
        return False
    return any(m == specifier or specifier.startswith(f"{m}/") for m in module_list)
