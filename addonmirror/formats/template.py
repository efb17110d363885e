"""Manifest template rendering.

An upstream repository ships an ``addon.xml.tpl`` whose version attribute
is a placeholder. Rendering substitutes the release version, drops the
XML declaration and re-joins the lines in the layout the repository
manifest expects: every line is preceded by the separator, and one more
separator closes the fragment.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Tuple

from ..common.errors import TemplateError
from .version import strip_version_prefix

XML_DECLARATION_PREFIX = "<?xml"

# Addon ids become directory names in the served and exported repository
ADDON_ID_RE = re.compile(r"^[A-Za-z0-9._-]+$")


@dataclass(frozen=True)
class TemplateLayout:
    """Byte layout of a rendered manifest fragment."""

    placeholder: str = "$VERSION"
    line_separator: str = "\r\n"
    leading_separator: bool = True


DEFAULT_LAYOUT = TemplateLayout()


def version_from_tag(tag: str) -> str:
    """Version substituted into a template for a release tag."""
    return strip_version_prefix(tag)


def decode_template(raw: bytes) -> str:
    """Decode template bytes as strict UTF-8.

    Raises:
        TemplateError: If the bytes are not valid UTF-8
    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TemplateError(f"Template is not valid UTF-8: {e}") from e


def split_lines(text: str) -> List[str]:
    """Split on LF, dropping one trailing CR per line.

    A terminating newline does not produce an extra empty line.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def render_template(
    raw: bytes,
    version: str,
    layout: TemplateLayout = DEFAULT_LAYOUT,
) -> str:
    """Render a manifest template for one version.

    Args:
        raw: Template bytes as fetched from upstream
        version: Version string replacing the placeholder
        layout: Placeholder and line layout

    Returns:
        The rendered fragment, terminated by the line separator

    Raises:
        TemplateError: If the template cannot be decoded
    """
    sep = layout.line_separator
    parts = []
    for line in split_lines(decode_template(raw)):
        if line.startswith(XML_DECLARATION_PREFIX):
            continue
        parts.append(line.replace(layout.placeholder, version, 1))

    if layout.leading_separator:
        body = "".join(sep + line for line in parts)
    else:
        body = sep.join(parts)
    return body + sep


def parse_addon_header(fragment: str) -> Tuple[str, str]:
    """Read the addon id and version from a rendered fragment.

    Args:
        fragment: Rendered manifest fragment (no XML declaration)

    Returns:
        Tuple of (addon_id, version)

    Raises:
        TemplateError: If the fragment is not well-formed XML, has no id, or
            the id or version is not usable as a path component
    """
    try:
        root = ET.fromstring(fragment.strip())
    except ET.ParseError as e:
        raise TemplateError(f"Rendered manifest is not well-formed XML: {e}") from e

    addon_id = (root.get("id") or "").strip()
    if not addon_id:
        raise TemplateError(f"Manifest root <{root.tag}> has no id attribute")

    if not ADDON_ID_RE.match(addon_id) or addon_id in (".", ".."):
        raise TemplateError(f"Invalid addon id {addon_id!r}")

    version = (root.get("version") or "").strip()
    if "/" in version or "\\" in version or version in (".", ".."):
        raise TemplateError(f"Invalid version {version!r} for addon {addon_id}")

    return addon_id, version
