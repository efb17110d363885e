"""Upstream release source access."""

from .github import FetchedProject, GitHubReleaseFetcher, build_client
from .models import Asset, Release

__all__ = [
    "Asset",
    "FetchedProject",
    "GitHubReleaseFetcher",
    "Release",
    "build_client",
]
