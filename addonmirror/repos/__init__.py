"""Repository aggregation, snapshot publication and queries.

Turns the release histories of the tracked upstream repositories into one
checksummed addon repository snapshot, and publishes it atomically.
"""

from .aggregator import AggregationResult, RepositoryAggregator, build_addon_manifest
from .base import (
    AddonManifest,
    ProjectFailure,
    RepositorySnapshot,
    build_manifest_document,
    compute_checksum,
)
from .export import write_static_repository
from .query import RepositoryView
from .store import PublishedState, RepositoryService, SnapshotStore

__all__ = [
    "AddonManifest",
    "AggregationResult",
    "ProjectFailure",
    "PublishedState",
    "RepositoryAggregator",
    "RepositoryService",
    "RepositorySnapshot",
    "RepositoryView",
    "SnapshotStore",
    "build_addon_manifest",
    "build_manifest_document",
    "compute_checksum",
    "write_static_repository",
]
