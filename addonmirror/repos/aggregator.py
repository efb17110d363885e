"""Repository aggregation.

Runs fetch, sort, render and verification for every tracked repository
concurrently and folds the survivors into a new RepositorySnapshot.
One repository failing never stops the others; it is left out of the
snapshot and reported as a ProjectFailure.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..common.errors import AddonMirrorError, IntegrityError
from ..common.logger import get_logger
from ..formats.template import (
    DEFAULT_LAYOUT,
    TemplateLayout,
    parse_addon_header,
    render_template,
    version_from_tag,
)
from ..upstream.github import FetchedProject, GitHubReleaseFetcher
from .base import AddonManifest, ProjectFailure, RepositorySnapshot

logger = get_logger("aggregator")


@dataclass(frozen=True)
class AggregationResult:
    """Outcome of one aggregation pass."""

    snapshot: RepositorySnapshot
    duration_seconds: float = 0.0

    @property
    def failures(self) -> Tuple[ProjectFailure, ...]:
        return self.snapshot.failures

    @property
    def is_complete(self) -> bool:
        """True if no repository was left out."""
        return not self.snapshot.failures


def build_addon_manifest(
    project: FetchedProject,
    layout: TemplateLayout = DEFAULT_LAYOUT,
) -> AddonManifest:
    """Render and verify the manifest of one fetched repository.

    Raises:
        TemplateError: If the template cannot be decoded or parsed
        IntegrityError: If the rendered version does not match the newest tag
    """
    latest = project.latest
    version = version_from_tag(latest.tag)
    if not version:
        raise IntegrityError(
            f"Latest release tag {latest.tag!r} has no version number",
            repository=project.repository,
        )

    try:
        rendered = render_template(project.template, version, layout)
        addon_id, declared_version = parse_addon_header(rendered)
    except AddonMirrorError as e:
        e.repository = e.repository or project.repository
        raise

    if declared_version != version:
        raise IntegrityError(
            f"Manifest {addon_id} declares version {declared_version!r} "
            f"but latest release {latest.tag} renders {version!r}",
            repository=project.repository,
        )

    return AddonManifest(
        repository=project.repository,
        addon_id=addon_id,
        declared_version=declared_version,
        rendered_xml=rendered,
        releases=tuple(project.releases),
    )


class RepositoryAggregator:
    """Builds RepositorySnapshots from the tracked upstream repositories."""

    def __init__(
        self,
        fetcher: GitHubReleaseFetcher,
        layout: TemplateLayout = DEFAULT_LAYOUT,
        max_parallel_fetches: int = 4,
    ):
        """Initialize the aggregator.

        Args:
            fetcher: Release fetcher used for every repository
            layout: Template layout applied to every manifest
            max_parallel_fetches: Upper bound on concurrently fetched repositories
        """
        self.fetcher = fetcher
        self.layout = layout
        self.max_parallel_fetches = max(1, max_parallel_fetches)

    async def _build_one(
        self, repository: str, semaphore: asyncio.Semaphore
    ) -> Union[AddonManifest, ProjectFailure]:
        try:
            async with semaphore:
                project = await self.fetcher.fetch(repository)
            return build_addon_manifest(project, self.layout)
        except AddonMirrorError as e:
            logger.warning(f"Skipping {repository}: {type(e).__name__}: {e.message}")
            return ProjectFailure(
                repository=repository,
                error_type=type(e).__name__,
                message=e.message,
            )
        except Exception as e:
            logger.exception(f"Unexpected error aggregating {repository}")
            return ProjectFailure(
                repository=repository,
                error_type=type(e).__name__,
                message=str(e),
            )

    async def aggregate(self, repositories: Sequence[str]) -> AggregationResult:
        """Aggregate every repository into a new snapshot.

        Args:
            repositories: Tracked repositories ("owner/name"); when two of them
                declare the same addon id, the one listed first keeps it

        Returns:
            AggregationResult with the new snapshot and per-repository failures
        """
        start = time.monotonic()
        semaphore = asyncio.Semaphore(self.max_parallel_fetches)

        logger.info(f"Aggregating {len(repositories)} repositories")
        # gather keeps input order, so id conflicts resolve by configured order
        results = await asyncio.gather(
            *(self._build_one(repository, semaphore) for repository in repositories)
        )

        manifests: List[AddonManifest] = []
        failures: List[ProjectFailure] = []
        owners: Dict[str, str] = {}
        for result in results:
            if isinstance(result, ProjectFailure):
                failures.append(result)
                continue

            owner: Optional[str] = owners.get(result.addon_id)
            if owner is not None:
                message = f"Addon id {result.addon_id} is already provided by {owner}"
                logger.warning(f"Skipping {result.repository}: IntegrityError: {message}")
                failures.append(
                    ProjectFailure(
                        repository=result.repository,
                        error_type=IntegrityError.__name__,
                        message=message,
                    )
                )
                continue

            owners[result.addon_id] = result.repository
            manifests.append(result)

        snapshot = RepositorySnapshot.from_manifests(manifests, failures)
        duration = time.monotonic() - start

        logger.info(
            f"Aggregation finished in {duration:.2f}s: "
            f"{len(manifests)} addons, {len(failures)} failed, checksum {snapshot.checksum}"
        )
        return AggregationResult(snapshot=snapshot, duration_seconds=duration)
