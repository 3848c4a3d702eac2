from collections.abc import Mapping
from types import MappingProxyType

from prebundle.errors import MalformedMetadataError
from prebundle.models import ExportsData


class ExportsIndex:
    def __init__(self, exports_data: Mapping[str, ExportsData]):
        self._data: Mapping[str, ExportsData] = MappingProxyType(dict(exports_data))

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._data

    def __len__(self) -> int:
        return len(self._data)

    def get(self, entry_id: str) -> ExportsData:
        """Returns the scanned metadata for an entry; never guesses on a miss."""
        data = self._data.get(entry_id)
        if data is None:
            raise MalformedMetadataError(entry_id, "no export metadata was scanned")
        return data
