"""Exception hierarchy for addon-mirror.

Per-project errors (fetch, template, integrity) are caught by the
aggregator and turn into omitted projects. NotFoundError is raised by
queries against the published snapshot.
"""

from typing import Optional


class AddonMirrorError(Exception):
    """Base class for all addon-mirror errors."""

    def __init__(self, message: str, repository: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.repository = repository

    def __str__(self) -> str:
        if self.repository:
            return f"{self.repository}: {self.message}"
        return self.message


class FetchError(AddonMirrorError):
    """Network or decoding failure talking to the upstream source."""


class TemplateError(AddonMirrorError):
    """Undecodable or malformed manifest template."""


class IntegrityError(AddonMirrorError):
    """Rendered manifest is inconsistent with the upstream release data."""


class NotFoundError(AddonMirrorError):
    """Query against an unknown addon or asset."""


class StoreError(AddonMirrorError):
    """Failure persisting a snapshot to disk."""


class ReloadError(AddonMirrorError):
    """A reload pass produced nothing that could be published."""
