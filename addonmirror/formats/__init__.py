"""Version ordering and manifest template rendering."""

from .template import (
    DEFAULT_LAYOUT,
    TemplateLayout,
    parse_addon_header,
    render_template,
    version_from_tag,
)
from .version import compare_versions, sort_releases, sort_versions, version_sort_key

__all__ = [
    "DEFAULT_LAYOUT",
    "TemplateLayout",
    "compare_versions",
    "parse_addon_header",
    "render_template",
    "sort_releases",
    "sort_versions",
    "version_from_tag",
    "version_sort_key",
]
