"""
URL resolution and normalization.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urldefrag, urljoin, urlparse, urlunparse

# Path extensions that identify static assets rather than navigable pages
NON_PAGE_EXTENSIONS: frozenset[str] = frozenset((
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".avif", ".ico",
    ".pdf", ".zip", ".rar", ".7z",
    ".mp4", ".mp3", ".wav", ".webm",
    ".css", ".js", ".map",
    ".woff", ".woff2", ".ttf", ".eot",
))

FETCHABLE_SCHEMES = ("http", "https")


def is_data_url(reference: str) -> bool:
    """Check if a reference uses the data: scheme."""
    return reference.strip().lower().startswith("data:")


def normalize_url(url: str) -> Optional[str]:
    """
    Normalize an absolute URL for deduplication and comparison.

    - Drops fragments (#...)
    - Normalizes scheme/host case
    - Removes default ports (:80, :443)
    - Keeps querystrings (they select distinct resources)

    Returns None for non-http(s) URLs and for URLs urllib refuses to parse.
    """
    try:
        defragged, _ = urldefrag(url)
        parsed = urlparse(defragged)
        scheme = parsed.scheme.lower()
        if scheme not in FETCHABLE_SCHEMES or not parsed.hostname:
            return None

        hostname = parsed.hostname.lower()
        port = parsed.port
    except ValueError:
        return None

    if (scheme == "http" and port == 80) or (scheme == "https" and port == 443):
        netloc = hostname
    elif port:
        netloc = f"{hostname}:{port}"
    else:
        netloc = hostname

    if ":" in hostname:
        # IPv6 literal lost its brackets in .hostname
        netloc = f"[{hostname}]" + netloc[len(hostname):]

    return urlunparse((
        scheme,
        netloc,
        parsed.path or "/",
        parsed.params,
        parsed.query,
        "",
    ))


def resolve_url(reference: Optional[str], base: str) -> Optional[str]:
    """
    Resolve a reference found on a page into a normalized absolute URL.

    Empty references, data: URLs, non-http(s) schemes (mailto:, javascript:...)
    and malformed references all resolve to None. They are dropped, never
    reported.
    """
    if not reference:
        return None
    reference = reference.strip()
    if not reference or is_data_url(reference):
        return None

    try:
        joined = urljoin(base, reference)
    except ValueError:
        return None
    return normalize_url(joined)


def same_host(url: str, base_url: str) -> bool:
    """Check if URL has the same hostname as the crawl's base URL."""
    try:
        return (urlparse(url).hostname or "") == (urlparse(base_url).hostname or "")
    except ValueError:
        return False


def is_navigable(url: str) -> bool:
    """Check that the URL path does not point at a static asset."""
    path_lower = (urlparse(url).path or "").lower()
    return not any(path_lower.endswith(ext) for ext in NON_PAGE_EXTENSIONS)
