"""
Traversal scope selection.

Turns a seed URL and a scope mode into the initial frontier of an export job.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List
from urllib.parse import urlparse

from ..errors import InvalidInput
from ..utils.paths import normalize_url, get_origin


class ScopeMode(str, Enum):
    """Which pages relative to the seed are eligible for export."""

    ONLY = "only"
    CHILDREN = "children"
    PARENTS = "parents"
    BOTH = "both"

    @classmethod
    def parse(cls, value) -> "ScopeMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise InvalidInput(f"Unknown scope {value!r} (expected one of: {choices})") from None

    @property
    def follows_links(self) -> bool:
        return self in (ScopeMode.CHILDREN, ScopeMode.BOTH)


@dataclass(frozen=True)
class FrontierEntry:
    """A URL waiting to be exported."""

    url: str
    depth: int
    # Link distance from the seed; only meaningful for expandable entries
    hops: int = 0
    expandable: bool = False


def validate_seed(seed_url: str) -> str:
    """
    Check and normalize a seed URL.

    Args:
        seed_url: URL supplied by the client

    Returns:
        Normalized absolute URL

    Raises:
        InvalidInput: If the URL is not an absolute http(s) URL
    """
    candidate = (seed_url or "").strip()
    if not candidate:
        raise InvalidInput("A seed URL is required")

    if urlparse(candidate).scheme.lower() not in ("http", "https"):
        raise InvalidInput(f"Seed URL must start with http:// or https://: {candidate}")

    try:
        normalized = normalize_url(candidate)
    except ValueError as e:
        raise InvalidInput(f"Malformed seed URL {candidate}: {e}") from e

    if not normalized:
        raise InvalidInput(f"Malformed seed URL: {candidate}")
    return normalized


def ancestor_urls(url: str) -> List[str]:
    """
    List the ancestors of a URL from the site root down to its parent.

    'https://x.test/a/b/c' gives ['https://x.test/', 'https://x.test/a',
    'https://x.test/a/b']. The root URL has no ancestors.
    """
    origin = get_origin(url)
    segments = [s for s in urlparse(url).path.split('/') if s]

    ancestors = []
    for i in range(len(segments)):
        ancestors.append(origin + '/' + '/'.join(segments[:i]))
    return ancestors


def build_frontier(seed_url: str, scope: ScopeMode) -> List[FrontierEntry]:
    """
    Compute the initial frontier for a job.

    Args:
        seed_url: Seed URL (validated and normalized here)
        scope: Traversal scope mode

    Returns:
        Ordered list of frontier entries, seed always last

    Raises:
        InvalidInput: If the seed URL is malformed
    """
    seed = validate_seed(seed_url)
    scope = ScopeMode.parse(scope)

    if scope is ScopeMode.ONLY:
        return [FrontierEntry(seed, 0)]

    if scope is ScopeMode.CHILDREN:
        return [FrontierEntry(seed, 0, hops=0, expandable=True)]

    # PARENTS and BOTH share the root-to-leaf ancestor chain
    ancestors = ancestor_urls(seed)
    entries = [FrontierEntry(url, depth) for depth, url in enumerate(ancestors)]
    entries.append(
        FrontierEntry(
            seed,
            len(ancestors),
            hops=0,
            expandable=scope is ScopeMode.BOTH,
        )
    )
    return entries
