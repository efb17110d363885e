"""Published snapshot holder and reload service.

The store keeps exactly one published RepositorySnapshot behind a single
reference. Publishing swaps the reference; readers never take a lock and
always see one complete snapshot. Callers should read current() once per
operation and keep using that snapshot.
"""

import itertools
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..common.errors import ReloadError
from ..common.logger import get_logger
from .aggregator import AggregationResult, RepositoryAggregator
from .base import RepositorySnapshot

logger = get_logger("store")


@dataclass(frozen=True)
class PublishedState:
    """A snapshot together with its publication metadata."""

    snapshot: RepositorySnapshot
    generation: int
    published_at: datetime


class SnapshotStore:
    """Holds the currently published RepositorySnapshot."""

    def __init__(self) -> None:
        self._state: Optional[PublishedState] = None
        # next() on itertools.count is atomic, so concurrent publishers get distinct numbers
        self._generations = itertools.count(1)

    def current(self) -> Optional[RepositorySnapshot]:
        """Return the latest published snapshot, or None before the first publish."""
        state = self._state
        return state.snapshot if state is not None else None

    def state(self) -> Optional[PublishedState]:
        """Return the latest published snapshot with its metadata."""
        return self._state

    @property
    def generation(self) -> int:
        state = self._state
        return state.generation if state is not None else 0

    @property
    def has_snapshot(self) -> bool:
        return self._state is not None

    def publish(self, snapshot: RepositorySnapshot) -> PublishedState:
        """Atomically replace the published snapshot.

        Publishing the snapshot that is already published is a no-op.
        """
        state = self._state
        if state is not None and state.snapshot is snapshot:
            return state

        new_state = PublishedState(
            snapshot=snapshot,
            generation=next(self._generations),
            published_at=datetime.now(timezone.utc),
        )
        self._state = new_state
        logger.info(
            f"Published snapshot generation {new_state.generation}: "
            f"{len(snapshot)} addons, checksum {snapshot.checksum}"
        )
        return new_state


class RepositoryService:
    """Runs reload passes and publishes their snapshots."""

    def __init__(
        self,
        aggregator: RepositoryAggregator,
        store: SnapshotStore,
        repositories: Sequence[str],
    ):
        self.aggregator = aggregator
        self.store = store
        self.repositories: List[str] = list(repositories)
        self.last_result: Optional[AggregationResult] = None
        self.last_error: Optional[str] = None
        self.last_reload_at: Optional[datetime] = None
        self.reload_count = 0
        self.failed_reload_count = 0

    async def reload(self) -> AggregationResult:
        """Aggregate all repositories and publish the result.

        Returns:
            The AggregationResult that was published

        Raises:
            ReloadError: If repositories are tracked but none of them survived;
                the previously published snapshot stays in place
        """
        self.reload_count += 1
        self.last_reload_at = datetime.now(timezone.utc)

        result = await self.aggregator.aggregate(self.repositories)
        self.last_result = result

        if self.repositories and result.snapshot.is_empty:
            self.failed_reload_count += 1
            self.last_error = (
                f"All {len(self.repositories)} repositories failed to aggregate"
            )
            logger.error(f"Reload failed, keeping previous snapshot: {self.last_error}")
            raise ReloadError(self.last_error)

        self.last_error = None
        self.store.publish(result.snapshot)
        return result

    def publish_empty(self) -> None:
        """Publish an empty but valid snapshot if nothing is published yet."""
        if not self.store.has_snapshot:
            logger.warning("Serving an empty repository until a reload succeeds")
            self.store.publish(RepositorySnapshot.empty())

    @property
    def is_degraded(self) -> bool:
        """True if the published snapshot is missing any tracked repository."""
        snapshot = self.store.current()
        if snapshot is None:
            return True
        if self.last_error is not None:
            return True
        return bool(snapshot.failures) or (bool(self.repositories) and snapshot.is_empty)
