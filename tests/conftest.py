"""Pytest configuration and shared fixtures."""

import base64
from typing import Dict, List, Optional, Sequence
from urllib.parse import unquote

import httpx
import pytest

from addonmirror.common.config import LoggingConfig, MirrorConfig, UpstreamConfig

API_URL = "https://api.github.test"


def make_template(addon_id: str, name: Optional[str] = None, prolog: bool = True) -> bytes:
    """Build an addon.xml.tpl with a $VERSION placeholder."""
    lines = []
    if prolog:
        lines.append('<?xml version="1.0" encoding="UTF-8" standalone="yes"?>')
    lines.extend([
        f'<addon id="{addon_id}" name="{name or addon_id}" version="$VERSION" provider-name="tester">',
        '  <extension point="xbmc.python.pluginsource" library="default.py"/>',
        "</addon>",
    ])
    return ("\n".join(lines) + "\n").encode("utf-8")


class FakeGitHub:
    """In-memory stand-in for the GitHub releases and contents API."""

    def __init__(self):
        self.releases: Dict[str, List[dict]] = {}
        self.templates: Dict[str, bytes] = {}
        self.status: Dict[str, int] = {}
        self.broken: set = set()
        self.template_refs: List[tuple] = []
        self.requests: List[httpx.Request] = []

    def add_release(
        self,
        repo: str,
        tag: str,
        assets: Optional[Sequence[str]] = None,
        body: str = "",
        prerelease: bool = False,
        draft: bool = False,
    ) -> dict:
        release = {
            "tag_name": tag,
            "name": f"Release {tag}",
            "body": body or f"Changes in {tag}",
            "draft": draft,
            "prerelease": prerelease,
            "published_at": "2024-01-01T00:00:00Z",
            "assets": [
                {
                    "name": asset,
                    "browser_download_url": f"https://github.com/{repo}/releases/download/{tag}/{asset}",
                    "size": 1024,
                    "content_type": "application/zip",
                }
                for asset in (assets or [])
            ],
        }
        self.releases.setdefault(repo, []).append(release)
        return release

    def add_project(
        self,
        repo: str,
        addon_id: str,
        tags: Sequence[str],
        template: Optional[bytes] = None,
    ) -> None:
        """Register a repository whose releases each carry <addon_id>-<version>.zip."""
        for tag in tags:
            self.add_release(repo, tag, assets=[f"{addon_id}-{tag.lstrip('v')}.zip"])
        self.templates[repo] = template if template is not None else make_template(addon_id)

    def remove_release(self, repo: str, tag: str) -> None:
        self.releases[repo] = [r for r in self.releases[repo] if r["tag_name"] != tag]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = unquote(request.url.path).strip("/").split("/")
        if len(parts) < 4 or parts[0] != "repos":
            return httpx.Response(404, json={"message": "Not Found"})

        repo = f"{parts[1]}/{parts[2]}"
        if repo in self.broken:
            raise httpx.ConnectError("connection refused", request=request)
        if repo in self.status:
            return httpx.Response(self.status[repo], json={"message": "error"})

        if parts[3] == "releases":
            if repo not in self.releases:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json=self.releases[repo])

        if parts[3] == "contents":
            ref = request.url.params.get("ref")
            self.template_refs.append((repo, ref))
            if repo not in self.templates:
                return httpx.Response(404, json={"message": "Not Found"})
            encoded = base64.encodebytes(self.templates[repo]).decode("ascii")
            return httpx.Response(
                200,
                json={"path": "/".join(parts[4:]), "content": encoded, "encoding": "base64"},
            )

        return httpx.Response(404, json={"message": "Not Found"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=API_URL,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def github():
    """Fake upstream API."""
    return FakeGitHub()


@pytest.fixture
def mirror_config():
    """Configuration pointing at the fake upstream, without file logging or retries."""
    return MirrorConfig(
        repositories=[],
        upstream=UpstreamConfig(api_url=API_URL, max_retries=1),
        logging=LoggingConfig(file_logging=False),
    )


@pytest.fixture
def two_projects(github, mirror_config):
    """Project A (v1.0.0, v1.1.0) and project B (v2.0.0)."""
    github.add_project("owner/repo-a", "plugin.video.a", ["v1.0.0", "v1.1.0"])
    github.add_project("owner/repo-b", "plugin.video.b", ["v2.0.0"])
    mirror_config.repositories = ["owner/repo-b", "owner/repo-a"]
    return github


@pytest.fixture
def addon_template():
    """Factory for addon.xml.tpl bytes."""
    return make_template


@pytest.fixture
def app_factory(github, mirror_config):
    """Build the FastAPI app against the fake upstream."""
    from gateway.api.main import create_app
    from gateway.core.config import Settings

    def factory(**settings):
        settings.setdefault("repositories", "")
        settings.setdefault("allow_empty_start", False)
        return create_app(
            settings=Settings(_env_file=None, **settings),
            mirror_config=mirror_config,
            http_client=github.client(),
        )

    return factory
