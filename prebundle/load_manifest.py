"""Loading of scanner output: entry files and their export metadata."""

import logging
from pathlib import Path
from typing import Any

import yaml

from prebundle.entry_registry import EntryRegistry
from prebundle.errors import ManifestError
from prebundle.exports_index import ExportsIndex
from prebundle.models import ExportsData

logger = logging.getLogger(__name__)


def load_manifest(
    path: str | Path, exclude: list[str] | None = None
) -> tuple[EntryRegistry, ExportsIndex]:
    """Build the registry and export index from a YAML (or JSON) manifest.

    Expected shape::

        entries: {flatId: path/to/entry.js}
        exports: {flatId: {imports: [...], exports: [...], has_reexports: false}}

    Relative entry paths are taken relative to the manifest's directory.
    """
    manifest_path = Path(path)
    data = yaml.safe_load(manifest_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ManifestError(f"{manifest_path}: top level must be a mapping")

    entries = _section(data, "entries", manifest_path)
    exports = _section(data, "exports", manifest_path)

    base_dir = manifest_path.parent.resolve()
    qualified = {
        str(flat_id): str((base_dir / str(entry)).resolve())
        for flat_id, entry in entries.items()
    }
    exports_data = {
        str(flat_id): _exports_data(flat_id, raw, manifest_path)
        for flat_id, raw in exports.items()
    }

    registry = EntryRegistry(qualified, exclude)
    registry.missing_files()
    logger.info(f"Loaded {len(qualified)} entries from {manifest_path}")
    return registry, ExportsIndex(exports_data)


def _section(data: dict[str, Any], key: str, source: Path) -> dict[str, Any]:
    section = data.get(key)
    if not isinstance(section, dict):
        raise ManifestError(f"{source}: '{key}' must be a mapping")
    return section


def _exports_data(flat_id: str, raw: Any, source: Path) -> ExportsData:
    if not isinstance(raw, dict):
        raise ManifestError(f"{source}: exports for '{flat_id}' must be a mapping")
    imports = raw.get("imports") or []
    exports = raw.get("exports") or []
    if not isinstance(imports, list) or not isinstance(exports, list):
        raise ManifestError(f"{source}: imports/exports for '{flat_id}' must be lists")
    return ExportsData(
        imports=tuple(str(i) for i in imports),
        exports=tuple(str(e) for e in exports),
        has_reexports=bool(raw.get("has_reexports", False)),
    )
