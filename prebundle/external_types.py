"""Predicate for specifiers that must never be inlined into a pre-bundle."""

import re
from collections.abc import Iterable

KNOWN_ASSET_TYPES: tuple[str, ...] = (
    # images
    "png",
    "jpg",
    "jpeg",
    "jfif",
    "pjpeg",
    "pjp",
    "gif",
    "svg",
    "ico",
    "webp",
    "avif",
    # media
    "mp4",
    "webm",
    "ogg",
    "mp3",
    "wav",
    "flac",
    "aac",
    # fonts
    "woff",
    "woff2",
    "eot",
    "ttf",
    "otf",
    # other
    "webmanifest",
    "pdf",
    "txt",
)

EXTERNAL_TYPES: tuple[str, ...] = (
    "css",
    # pre-processors
    "less",
    "sass",
    "scss",
    "styl",
    "stylus",
    "pcss",
    "postcss",
    # single-file components
    "vue",
    "svelte",
    "marko",
    "astro",
    # may be compiled differently from the default JS/TS handling
    "jsx",
    "tsx",
    *KNOWN_ASSET_TYPES,
)


def external_types_pattern(extra: Iterable[str] | None = None) -> re.Pattern[str]:
    """Build the extension matcher, optionally extended with configured assets."""
    types = list(EXTERNAL_TYPES)
    for ext in extra or ():
        ext = ext.lstrip(".")
        if ext and ext not in types:
            types.append(ext)
    alternatives = "|".join(re.escape(t) for t in types)
    return re.compile(rf"\.({alternatives})(\?.*)?$")


EXTERNAL_TYPES_RE = external_types_pattern()


def is_external_type(specifier: str, pattern: re.Pattern[str] = EXTERNAL_TYPES_RE) -> bool:
    """Return True when the specifier's extension is in the externalized set."""
    return pattern.search(specifier) is not None
