"""Exception types raised by the pre-bundle core."""


class PrebundleError(Exception):
    """Base class for fatal pre-bundle problems."""


class MalformedMetadataError(PrebundleError):
    """An entry id has no export metadata or no registered file."""

    def __init__(self, entry_id: str, reason: str):
        self.entry_id = entry_id
        super().__init__(f"Malformed metadata for entry '{entry_id}': {reason}")


class ManifestError(PrebundleError):
    """A manifest file could not be turned into a registry."""
