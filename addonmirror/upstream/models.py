"""Release data models.

GitHub* classes validate the upstream API payloads; Asset and Release
are the immutable records the rest of the pipeline works with.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..common.logger import get_logger

logger = get_logger("models")


class GitHubAsset(BaseModel):
    """Asset entry of a GitHub release payload."""

    model_config = ConfigDict(extra="ignore")

    name: str
    browser_download_url: str
    size: int = 0
    content_type: str = "application/octet-stream"


class GitHubRelease(BaseModel):
    """GitHub "list releases" entry."""

    model_config = ConfigDict(extra="ignore")

    tag_name: str
    name: Optional[str] = None
    body: Optional[str] = None
    draft: bool = False
    prerelease: bool = False
    published_at: Optional[datetime] = None
    assets: List[GitHubAsset] = Field(default_factory=list)

    def to_release(self) -> "Release":
        return Release(
            tag=self.tag_name,
            display_name=self.name or self.tag_name,
            changelog_body=self.body or "",
            published_at=self.published_at,
            prerelease=self.prerelease,
            assets=tuple(
                Asset(
                    name=a.name,
                    download_url=a.browser_download_url,
                    size=a.size,
                    content_type=a.content_type,
                )
                for a in self.assets
            ),
        )


class GitHubContent(BaseModel):
    """GitHub "get repository content" payload for a single file."""

    model_config = ConfigDict(extra="ignore")

    path: str = ""
    content: str = ""
    encoding: str = "base64"


@dataclass(frozen=True)
class Asset:
    """Downloadable file attached to a release."""

    name: str
    download_url: str
    size: int = 0
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class Release:
    """One published version of an upstream repository."""

    tag: str
    display_name: str = ""
    changelog_body: str = ""
    published_at: Optional[datetime] = None
    assets: Tuple[Asset, ...] = ()
    prerelease: bool = False
    _asset_index: Mapping[str, Asset] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        index: Dict[str, Asset] = {}
        for asset in self.assets:
            if asset.name in index:
                logger.warning(
                    f"Release {self.tag} lists asset {asset.name} more than once, "
                    f"keeping the first"
                )
                continue
            index[asset.name] = asset
        object.__setattr__(self, "_asset_index", index)

    def get_asset(self, name: str) -> Optional[Asset]:
        """Look up an asset by file name."""
        return self._asset_index.get(name)

    @property
    def asset_names(self) -> List[str]:
        return list(self._asset_index)

    def format_changelog_entry(self) -> str:
        """Render this release as a changelog section."""
        return f"{self.tag}\n-------\n{self.changelog_body}\n\n"
