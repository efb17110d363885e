"""Version ordering for upstream release tags.

Tags are free-form ("v1.2.0", "release-2.0", "1.0.0-beta.2"), so the
comparator never raises: every string maps to a sort key and the order
over keys is total.

Ordering rules:
- A leading non-numeric prefix is ignored ("v1.2" == "1.2").
- Dotted numeric segments compare numerically, missing segments are
  zero ("1.10.0" > "1.9.9", "1.0" == "1.0.0").
- A trailing label marks a pre-release and sorts below the same numbers
  without one ("1.0.0-rc1" < "1.0.0"). Labels compare piecewise, numbers
  numerically and below words.
- Strings without any digits sort below every numbered version.
"""

import re
from typing import Iterable, List, Sequence, Tuple, TypeVar

_VERSION_RE = re.compile(r"^\D*(\d+(?:\.\d+)*)(.*)$", re.DOTALL | re.ASCII)
_LABEL_PART_RE = re.compile(r"\d+|[^\W\d_]+")
_PREFIX_RE = re.compile(r"^\D*", re.ASCII)

# (digit count, digits without leading zeros); orders like the integer value
# without converting, so arbitrarily long segments are fine
Number = Tuple[int, str]
LabelPart = Tuple[int, Number, str]
OrderingKey = Tuple[int, Tuple[Number, ...], int, Tuple[LabelPart, ...], str]
VersionKey = Tuple[int, Tuple[Number, ...], int, Tuple[LabelPart, ...], str, str]

ZERO: Number = (1, "0")

T = TypeVar("T")


def strip_version_prefix(tag: str) -> str:
    """Drop the leading non-digit prefix of a tag ("v1.2.0" -> "1.2.0")."""
    return _PREFIX_RE.sub("", tag, count=1)


def _number(digits: str) -> Number:
    digits = digits.lstrip("0") or "0"
    return (len(digits), digits)


def _label_key(label: str) -> Tuple[LabelPart, ...]:
    parts = []
    for part in _LABEL_PART_RE.findall(label):
        if part.isdigit():
            parts.append((0, _number(part), ""))
        else:
            parts.append((1, ZERO, part.lower()))
    return tuple(parts)


def _ordering_key(version: str) -> OrderingKey:
    match = _VERSION_RE.match(version.strip())
    if match is None:
        # No digits at all
        return (0, (), 0, (), version.lower())

    numbers = [_number(segment) for segment in match.group(1).split(".")]
    while len(numbers) > 1 and numbers[-1] == ZERO:
        numbers.pop()

    label = match.group(2).strip().lstrip("-._+~")
    if not label:
        return (1, tuple(numbers), 1, (), "")
    return (1, tuple(numbers), 0, _label_key(label), label.lower())


def version_sort_key(version: str) -> VersionKey:
    """Sort key for a version string.

    The raw string is appended as the last element so that versions which
    compare equal ("v1.0" and "1.0.0") still sort deterministically.
    """
    return _ordering_key(version) + (version,)


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns:
        1 if a is newer than b, -1 if older, 0 if they denote the same version
    """
    key_a = _ordering_key(a)
    key_b = _ordering_key(b)
    return (key_a > key_b) - (key_a < key_b)


def sort_versions(versions: Iterable[str]) -> List[str]:
    """Sort version strings newest-first."""
    return sorted(versions, key=version_sort_key, reverse=True)


def sort_releases(releases: Sequence[T]) -> List[T]:
    """Sort release records newest-first by their ``tag`` attribute."""
    return sorted(releases, key=lambda release: version_sort_key(release.tag), reverse=True)
