"""
Source Resolution - rewrite remote asset URLs to the same-origin asset proxy

Canvas export only works for pixels that came from the app's own origin, so
images on the asset bucket are re-served through the proxy route.
"""

from typing import Optional, Sequence
from urllib.parse import urlsplit

from loguru import logger

from config import settings


PASSTHROUGH_SCHEMES = ("data:", "blob:", "file:")


def to_same_origin(
    url: str,
    host_patterns: Optional[Sequence[str]] = None,
    proxy_base: Optional[str] = None
) -> str:
    """
    Rewrite a known asset-storage URL to the proxy path, keeping the object key

    Args:
        url: Image URL
        host_patterns: Substrings identifying asset-storage URLs
            (default: settings.ASSET_PROXY_PATTERNS)
        proxy_base: Proxy prefix the object key is appended to
            (default: settings.ASSET_PROXY_BASE)

    Returns:
        Proxied URL, or ``url`` unchanged
    """
    if not url or url.startswith(PASSTHROUGH_SCHEMES):
        return url

    patterns = settings.ASSET_PROXY_PATTERNS if host_patterns is None else host_patterns
    base = settings.ASSET_PROXY_BASE if proxy_base is None else proxy_base

    if not any(pattern and pattern in url for pattern in patterns):
        return url

    try:
        parts = urlsplit(url)
    except ValueError as e:
        logger.warning(f"Could not parse asset URL {url!r}: {e}")
        return url

    if not parts.scheme or not parts.netloc:
        return url

    key = parts.path.lstrip("/")
    if not key:
        return url

    proxied = base.rstrip("/") + "/" + key
    logger.debug(f"Proxying asset {url} -> {proxied}")
    return proxied
