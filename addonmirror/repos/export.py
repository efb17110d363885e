"""Static export of a snapshot.

Writes the same files the HTTP service serves into a directory tree that
any static web server can host. Binary assets are not downloaded; the
index links point at the per-addon paths a redirecting server resolves.
"""

from pathlib import Path
from typing import List

from ..common.errors import StoreError
from ..common.logger import get_logger
from .base import RepositorySnapshot
from .query import RepositoryView

logger = get_logger("export")

ADDON_XML_PROLOG = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'


def _write(base: Path, path: Path, data: bytes) -> None:
    """Write a file through a temporary sibling so readers never see a partial file.

    Raises:
        StoreError: If the path resolves outside base or cannot be written
    """
    root = base.resolve()
    resolved = path.resolve()
    if resolved != root and root not in resolved.parents:
        raise StoreError(f"Refusing to write {path} outside {base}")

    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
    except OSError as e:
        raise StoreError(f"Failed to write {path}: {e}") from e


def write_static_repository(snapshot: RepositorySnapshot, output_dir: str) -> List[Path]:
    """Write addons.xml, its checksum, the index and per-addon files.

    Args:
        snapshot: Snapshot to export
        output_dir: Target directory, created if missing

    Returns:
        Paths of the written files

    Raises:
        StoreError: If any file cannot be written
    """
    base = Path(output_dir)
    view = RepositoryView(snapshot)
    written: List[Path] = []

    for manifest in snapshot:
        addon_dir = base / manifest.addon_id

        addon_xml = addon_dir / "addon.xml"
        _write(base, addon_xml, (ADDON_XML_PROLOG + manifest.rendered_xml).encode("utf-8"))
        written.append(addon_xml)

        changelog = addon_dir / f"changelog-{manifest.declared_version}.txt"
        _write(base, changelog, manifest.changelog().encode("utf-8"))
        written.append(changelog)

    # The checksum goes last so consumers polling it never see a newer
    # checksum than the document it describes
    for name, data in (
        ("index.html", view.index_html().encode("utf-8")),
        ("addons.xml", snapshot.manifest_document),
        ("addons.xml.md5", snapshot.checksum.encode("ascii")),
    ):
        path = base / name
        _write(base, path, data)
        written.append(path)

    logger.info(f"Exported {len(snapshot)} addons to {base}")
    return written
