"""Repository snapshot data structures.

A RepositorySnapshot is the unit that gets published: the rendered
manifest of every addon that survived one aggregation pass, plus the
manifest document and checksum derived from them. Snapshots are never
mutated after construction.
"""

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..upstream.models import Asset, Release

MANIFEST_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n<addons>'
MANIFEST_FOOTER = "</addons>"


@dataclass(frozen=True)
class AddonManifest:
    """Rendered manifest and release history of one tracked repository."""

    repository: str
    addon_id: str
    declared_version: str
    rendered_xml: str
    releases: Tuple[Release, ...]  # newest-first

    @property
    def current_release(self) -> Release:
        return self.releases[0]

    def get_asset(self, name: str) -> Optional[Asset]:
        """Look up an asset of the current release by file name."""
        return self.current_release.get_asset(name)

    def primary_asset(self) -> Optional[Asset]:
        """The installable zip of the current release.

        Prefers a zip whose name ends with the declared version; otherwise
        the last zip listed.
        """
        zips = [a for a in self.current_release.assets if a.name.endswith(".zip")]
        versioned = [a for a in zips if a.name.endswith(f"{self.declared_version}.zip")]
        candidates = versioned or zips
        return candidates[-1] if candidates else None

    def changelog(self) -> str:
        """All releases newest-first as changelog text."""
        return "".join(release.format_changelog_entry() for release in self.releases)


@dataclass(frozen=True)
class ProjectFailure:
    """A repository that was left out of a snapshot, and why."""

    repository: str
    error_type: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "repository": self.repository,
            "error_type": self.error_type,
            "message": self.message,
        }


def build_manifest_document(fragments: Iterable[str]) -> bytes:
    """Assemble the served addons.xml document from rendered fragments."""
    return (MANIFEST_HEADER + "".join(fragments) + MANIFEST_FOOTER).encode("utf-8")


def compute_checksum(document: bytes) -> str:
    """Hex MD5 of a manifest document, as served in addons.xml.md5."""
    return hashlib.md5(document).hexdigest()


@dataclass(frozen=True)
class RepositorySnapshot:
    """Immutable result of one aggregation pass.

    Addons are keyed by id; ``addon_ids`` is the sorted key sequence that
    fixes the concatenation order of the manifest document.
    """

    addons: Mapping[str, AddonManifest]
    failures: Tuple[ProjectFailure, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    addon_ids: Tuple[str, ...] = field(init=False)
    manifest_document: bytes = field(init=False, repr=False)
    checksum: str = field(init=False)

    def __post_init__(self) -> None:
        addons = MappingProxyType(dict(self.addons))
        ids = tuple(sorted(addons))
        document = build_manifest_document(addons[addon_id].rendered_xml for addon_id in ids)
        object.__setattr__(self, "addons", addons)
        object.__setattr__(self, "addon_ids", ids)
        object.__setattr__(self, "manifest_document", document)
        object.__setattr__(self, "checksum", compute_checksum(document))

    @classmethod
    def from_manifests(
        cls,
        manifests: Iterable[AddonManifest],
        failures: Iterable[ProjectFailure] = (),
    ) -> "RepositorySnapshot":
        return cls(
            addons={m.addon_id: m for m in manifests},
            failures=tuple(failures),
        )

    @classmethod
    def empty(cls) -> "RepositorySnapshot":
        return cls(addons={})

    def __len__(self) -> int:
        return len(self.addon_ids)

    def __iter__(self) -> Iterator[AddonManifest]:
        """Iterate manifests in sorted id order."""
        return (self.addons[addon_id] for addon_id in self.addon_ids)

    def __contains__(self, addon_id: object) -> bool:
        return addon_id in self.addons

    def get(self, addon_id: str) -> Optional[AddonManifest]:
        return self.addons.get(addon_id)

    @property
    def is_empty(self) -> bool:
        return not self.addon_ids

    @property
    def repositories(self) -> List[str]:
        return [m.repository for m in self]

    def summary(self) -> Dict[str, object]:
        return {
            "addons": len(self.addon_ids),
            "failures": len(self.failures),
            "checksum": self.checksum,
            "created_at": self.created_at.isoformat(),
        }
