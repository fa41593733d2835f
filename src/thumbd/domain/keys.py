"""Destination key derivation for renditions."""

import re
from typing import Optional
from urllib.parse import urlparse

DEFAULT_FORMAT = "jpg"

_URL_PATTERN = re.compile(r"https?://")


def thumbnail_key(original: str, suffix: str, format: Optional[str] = None) -> str:
    """
    Generate the storage key for a rendition of `original`.

    The final extension segment of `original` is replaced by
    `_<suffix>.<format>`; e.g. ``thumbnail_key("a/b/photo.jpg", "small")``
    gives ``"a/b/photo_small.jpg"``.

    Args:
        original: Key of the original image
        suffix: Rendition suffix, e.g. "small"
        format: Rendition format, defaults to "jpg"

    Returns:
        Destination key
    """
    prefix = ".".join(original.split(".")[:-1])
    return f"{prefix}_{suffix}.{format or DEFAULT_FORMAT}"


def is_url(destination: str) -> bool:
    """Check whether a destination is a full http(s) URL."""
    return bool(_URL_PATTERN.match(destination))


def destination_from_url(destination: str) -> str:
    """
    Get a storage key from a URL.

    ``http://example.com/foo/test.jpg`` becomes ``example.com/foo/test.jpg``.
    """
    parsed = urlparse(destination)
    path = parsed.path
    if parsed.query:
        path = f"{path}?{parsed.query}"
    return f"{parsed.hostname}{path}"


def resolve_key(destination: str) -> str:
    """Storage key for a destination that may be a bare key or a URL."""
    if is_url(destination):
        return destination_from_url(destination)
    return destination
