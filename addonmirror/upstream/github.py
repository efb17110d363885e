"""Release fetcher for GitHub-hosted addon repositories.

For one repository, fetches the release list and the manifest template
as of the newest release's tag, so template changes track the release
they describe rather than the default branch.
"""

import asyncio
import base64
import binascii
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..common.config import UpstreamConfig
from ..common.errors import FetchError
from ..common.logger import get_logger
from ..formats.version import sort_releases
from .models import GitHubContent, GitHubRelease, Release

logger = get_logger("github")

RELEASES_PER_PAGE = 100
MAX_RELEASE_PAGES = 20
RETRYABLE_STATUS = {500, 502, 503, 504}


@dataclass(frozen=True)
class FetchedProject:
    """Raw upstream data for one repository."""

    repository: str
    releases: List[Release]  # newest-first
    template: bytes

    @property
    def latest(self) -> Release:
        return self.releases[0]


def build_client(config: UpstreamConfig) -> httpx.AsyncClient:
    """Create the HTTP client used to talk to the release API."""
    return httpx.AsyncClient(
        base_url=config.api_url,
        timeout=config.timeout,
        follow_redirects=True,
        headers={
            "Accept": "application/vnd.github+json",
            "User-Agent": config.user_agent,
        },
    )


class GitHubReleaseFetcher:
    """Fetches releases and manifest templates from the GitHub REST API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        template_path: str = "addon.xml.tpl",
        include_prereleases: bool = True,
        max_retries: int = 3,
        retry_delay: float = 0.5,
    ):
        """Initialize the fetcher.

        Args:
            client: HTTP client; its base_url points at the API root
            template_path: Path of the manifest template inside each repository
            include_prereleases: Whether releases flagged as prerelease are kept
            max_retries: Attempts per request on transport errors and 5xx
            retry_delay: Initial delay between retries (doubles each retry)
        """
        self.client = client
        self.template_path = template_path.lstrip("/")
        self.include_prereleases = include_prereleases
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay

    async def _get(self, repository: str, url: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """GET with retry on transport errors and 5xx responses.

        Raises:
            FetchError: If the request fails after all retries or returns 4xx
        """
        delay = self.retry_delay
        last_error = ""

        for attempt in range(self.max_retries):
            try:
                response = await self.client.get(url, params=params)
            except httpx.TimeoutException as e:
                last_error = f"timed out: {e!r}"
            except httpx.HTTPError as e:
                last_error = f"request failed: {e!r}"
            else:
                if response.status_code < 400:
                    return response
                if response.status_code not in RETRYABLE_STATUS:
                    raise FetchError(
                        f"GET {url} returned HTTP {response.status_code}",
                        repository=repository,
                    )
                last_error = f"HTTP {response.status_code}"

            logger.warning(
                f"GET {url} for {repository} failed "
                f"(attempt {attempt + 1}/{self.max_retries}): {last_error}"
            )
            if attempt < self.max_retries - 1:
                await asyncio.sleep(delay)
                delay *= 2

        raise FetchError(f"GET {url} {last_error}", repository=repository)

    @staticmethod
    def _json(repository: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(
                f"Response from {response.request.url} is not valid JSON", repository=repository
            ) from e

    async def list_releases(self, repository: str) -> List[Release]:
        """Fetch every published release of a repository, unsorted.

        Follows pagination links. Drafts are skipped, and so are
        prereleases unless include_prereleases is set.

        Raises:
            FetchError: On network failure or an unexpected payload
        """
        url: Optional[str] = f"/repos/{repository}/releases"
        params: Optional[Dict[str, Any]] = {"per_page": RELEASES_PER_PAGE}
        releases: List[Release] = []

        for _ in range(MAX_RELEASE_PAGES):
            if url is None:
                break
            response = await self._get(repository, url, params)
            payload = self._json(repository, response)
            if not isinstance(payload, list):
                raise FetchError("Release list is not a JSON array", repository=repository)

            try:
                page = [GitHubRelease.model_validate(item) for item in payload]
            except ValidationError as e:
                raise FetchError(f"Unexpected release payload: {e}", repository=repository) from e

            for entry in page:
                if entry.draft:
                    continue
                if entry.prerelease and not self.include_prereleases:
                    continue
                releases.append(entry.to_release())

            next_link = response.links.get("next")
            url = next_link.get("url") if next_link else None
            # The next link already carries the query string
            params = None
        else:
            if url is not None:
                logger.warning(
                    f"{repository}: stopped after {MAX_RELEASE_PAGES} release pages"
                )

        return releases

    async def fetch_template(self, repository: str, ref: str) -> bytes:
        """Fetch the raw manifest template as of a git ref.

        Raises:
            FetchError: On network failure or undecodable content
        """
        url = f"/repos/{repository}/contents/{self.template_path}"
        response = await self._get(repository, url, {"ref": ref})

        try:
            content = GitHubContent.model_validate(self._json(repository, response))
        except ValidationError as e:
            raise FetchError(f"Unexpected content payload: {e}", repository=repository) from e

        if content.encoding != "base64":
            raise FetchError(
                f"Unsupported content encoding {content.encoding!r} for {self.template_path}",
                repository=repository,
            )

        try:
            # GitHub wraps the base64 payload at 60 columns
            return base64.b64decode("".join(content.content.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise FetchError(
                f"Template {self.template_path}@{ref} is not valid base64", repository=repository
            ) from e

    async def fetch(self, repository: str) -> FetchedProject:
        """Fetch releases (newest-first) and the template of the newest one.

        Raises:
            FetchError: On any upstream failure, or if there are no releases
        """
        releases = sort_releases(await self.list_releases(repository))
        if not releases:
            raise FetchError("Repository has no releases", repository=repository)

        latest = releases[0]
        logger.debug(f"{repository}: {len(releases)} releases, latest {latest.tag}")

        template = await self.fetch_template(repository, latest.tag)
        return FetchedProject(repository=repository, releases=releases, template=template)
