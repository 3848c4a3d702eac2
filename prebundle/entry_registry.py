"""Read-only mapping from flattened dependency ids to entry files."""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

from prebundle.flatten_id import flatten_id
from prebundle.path_utils import module_list_contains

logger = logging.getLogger(__name__)


class EntryRegistry:
    """Designated pre-bundle roots for one bundling run.

    The mapping is copied on construction and exposed read-only, so a single
    instance can be shared by every event handler of the run.
    """

    def __init__(
        self,
        qualified: Mapping[str, str],
        exclude: Iterable[str] | None = None,
    ):
        self._qualified: Mapping[str, str] = MappingProxyType(dict(qualified))
        self._exclude: tuple[str, ...] = tuple(exclude or ())

    @property
    def qualified(self) -> Mapping[str, str]:
        return self._qualified

    @property
    def exclude(self) -> tuple[str, ...]:
        return self._exclude

    def __contains__(self, flat_id: object) -> bool:
        return flat_id in self._qualified

    def __len__(self) -> int:
        return len(self._qualified)

    def __iter__(self):
        return iter(self._qualified)

    def path_of(self, flat_id: str) -> str | None:
        """Return the entry file registered under an already flattened id."""
        return self._qualified.get(flat_id)

    def entry_for(self, specifier: str) -> str | None:
        """Flatten a specifier and return its flat id if it is a registered entry."""
        flat_id = flatten_id(specifier)
        if flat_id in self._qualified:
            return flat_id
        return None

    def importer_path(self, importer: str) -> str:
        """Map a virtual entry id used as an importer to its real file."""
        return self._qualified.get(importer, importer)

    def is_excluded(self, specifier: str) -> bool:
        return module_list_contains(self._exclude, specifier)

    def missing_files(self) -> list[str]:
        """List flat ids whose registered file does not exist."""
        missing = [fid for fid, p in self._qualified.items() if not Path(p).is_file()]
        for fid in missing:
            logger.warning(f"Entry '{fid}' points at a missing file: {self._qualified[fid]}")
        return missing
