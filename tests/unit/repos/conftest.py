"""Fixtures for repository tests."""

import pytest

from addonmirror.repos.base import AddonManifest
from addonmirror.upstream.models import Asset, Release


def make_manifest(addon_id, version="1.0.0", assets=None, repository=None, extra_releases=()):
    """Build an AddonManifest whose current release is v<version>."""
    assets = assets if assets is not None else [f"{addon_id}-{version}.zip"]
    release = Release(
        tag=f"v{version}",
        changelog_body=f"notes {version}",
        assets=tuple(Asset(name=a, download_url=f"https://dl/{a}") for a in assets),
    )
    return AddonManifest(
        repository=repository or f"owner/{addon_id}",
        addon_id=addon_id,
        declared_version=version,
        rendered_xml=f'\r\n<addon id="{addon_id}" version="{version}"/>\r\n',
        releases=(release,) + tuple(extra_releases),
    )


@pytest.fixture
def manifest_factory():
    """Factory for AddonManifest records."""
    return make_manifest
