"""Wiring of the aggregation pipeline from configuration."""

from typing import Optional, Sequence

import httpx

from .common.config import MirrorConfig
from .formats.template import TemplateLayout
from .repos.aggregator import RepositoryAggregator
from .repos.store import RepositoryService, SnapshotStore
from .upstream.github import GitHubReleaseFetcher


def layout_from_config(config: MirrorConfig) -> TemplateLayout:
    return TemplateLayout(
        placeholder=config.template.placeholder,
        line_separator=config.template.line_separator,
        leading_separator=config.template.leading_separator,
    )


def build_service(
    config: MirrorConfig,
    client: httpx.AsyncClient,
    store: Optional[SnapshotStore] = None,
    repositories: Optional[Sequence[str]] = None,
) -> RepositoryService:
    """Create a RepositoryService for the configured repositories.

    Args:
        config: Parsed configuration
        client: HTTP client for the release API; the caller owns and closes it
        store: Store to publish into (a new one by default)
        repositories: Overrides the configured repository list

    Returns:
        RepositoryService ready to reload
    """
    fetcher = GitHubReleaseFetcher(
        client,
        template_path=config.template.path,
        include_prereleases=config.upstream.include_prereleases,
        max_retries=config.upstream.max_retries,
    )
    aggregator = RepositoryAggregator(
        fetcher,
        layout=layout_from_config(config),
        max_parallel_fetches=config.upstream.max_parallel_fetches,
    )
    return RepositoryService(
        aggregator,
        store if store is not None else SnapshotStore(),
        repositories if repositories is not None else config.repositories,
    )
