"""Read-side queries over one RepositorySnapshot."""

from typing import Dict

from jinja2 import Environment

from ..common.errors import NotFoundError
from .base import AddonManifest, RepositorySnapshot

_jinja = Environment(autoescape=True, keep_trailing_newline=True)

INDEX_TEMPLATE = _jinja.from_string(
    """<html>
    <head><title>Index</title></head>
    <body>
        <ul>
        {%- for addon_id, filename in entries.items() %}
            <li><a href="{{ addon_id }}/{{ filename }}">{{ filename }}</a></li>
        {%- endfor %}
        </ul>
    </body>
</html>
"""
)


class RepositoryView:
    """Answers repository queries against a single snapshot.

    Build one per request from ``store.current()`` so that every answer in
    the request comes from the same snapshot.
    """

    def __init__(self, snapshot: RepositorySnapshot):
        self.snapshot = snapshot

    def addon(self, addon_id: str) -> AddonManifest:
        manifest = self.snapshot.get(addon_id)
        if manifest is None:
            raise NotFoundError(f"Unknown addon {addon_id}")
        return manifest

    def index(self) -> Dict[str, str]:
        """Map addon id to its primary zip asset name, in sorted id order."""
        entries = {}
        for manifest in self.snapshot:
            asset = manifest.primary_asset()
            if asset is not None:
                entries[manifest.addon_id] = asset.name
        return entries

    def index_html(self) -> str:
        return INDEX_TEMPLATE.render(entries=self.index())

    def manifest_document(self) -> bytes:
        return self.snapshot.manifest_document

    def checksum(self) -> str:
        return self.snapshot.checksum

    def changelog(self, addon_id: str) -> str:
        return self.addon(addon_id).changelog()

    def asset_url(self, addon_id: str, name: str) -> str:
        """Download URL of a named asset of the addon's current release."""
        asset = self.addon(addon_id).get_asset(name)
        if asset is None:
            raise NotFoundError(f"Addon {addon_id} has no asset {name}")
        return asset.download_url
