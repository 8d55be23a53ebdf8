"""
Image and link extraction from HTML documents.

Matching rules are kept as module data so callers and tests can see exactly
which tags, attributes and CSS properties are read.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Union

from bs4 import BeautifulSoup

from image_verifier.urls import is_data_url, is_navigable, resolve_url, same_host

# (tag, attribute) pairs whose value is a single image reference
IMAGE_SOURCE_ATTRIBUTES: tuple[tuple[str, str], ...] = (
    ("img", "src"),
)

# Attributes holding responsive candidate lists, read on any element
SRCSET_ATTRIBUTES: tuple[str, ...] = ("srcset",)

# CSS properties whose url(...) arguments are images
BACKGROUND_PROPERTIES: tuple[str, ...] = ("background", "background-image")

# (tag, attribute) pairs that point at other pages
LINK_ATTRIBUTES: tuple[tuple[str, str], ...] = (
    ("a", "href"),
)

PARSER = "lxml"

_DECLARATION_RE = re.compile(
    r"(?:^|[;{\s])(?P<prop>[-a-zA-Z]+)\s*:\s*(?P<value>(?:url\([^)]*\)|[^;{}])*)",
    re.IGNORECASE,
)
_CSS_URL_RE = re.compile(
    r"""url\(\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^)'"\s]*))\s*\)""",
    re.IGNORECASE,
)


@dataclass
class Extraction:
    """Images and same-host links found in one document, in document order."""
    images: Dict[str, None] = field(default_factory=dict)
    links: Dict[str, None] = field(default_factory=dict)

    def add_image(self, url: Optional[str]) -> None:
        if url:
            self.images.setdefault(url, None)

    def add_link(self, url: Optional[str]) -> None:
        if url:
            self.links.setdefault(url, None)


def parse_srcset(value: str) -> List[str]:
    """
    Split a srcset value into candidate URLs, dropping width/density descriptors.

    "a.png 1x, b.png 2x" -> ["a.png", "b.png"]. A data: candidate keeps its
    embedded commas since only whitespace ends a candidate URL.
    """
    candidates: List[str] = []
    pos, end = 0, len(value)

    while pos < end:
        while pos < end and (value[pos].isspace() or value[pos] == ","):
            pos += 1
        if pos >= end:
            break

        start = pos
        while pos < end and not value[pos].isspace():
            pos += 1
        token = value[start:pos]

        if is_data_url(token):
            candidates.append(token.rstrip(","))
        else:
            # "a.png,b.png 2x" written without spaces
            candidates.extend(part for part in token.split(",") if part)
        if token.endswith(","):
            continue

        # Skip the descriptor up to the next candidate
        while pos < end and value[pos] != ",":
            pos += 1

    return candidates


def extract_css_urls(css: str) -> List[str]:
    """Return url(...) arguments of background declarations in a CSS fragment."""
    urls: List[str] = []
    for declaration in _DECLARATION_RE.finditer(css):
        if declaration.group("prop").lower() not in BACKGROUND_PROPERTIES:
            continue
        for match in _CSS_URL_RE.finditer(declaration.group("value")):
            ref = match.group("dq") or match.group("sq") or match.group("bare")
            if ref:
                urls.append(ref.strip())
    return urls


def _attribute_values(soup: BeautifulSoup, tag: Union[str, bool], attribute: str) -> Iterator[str]:
    for element in soup.find_all(tag, attrs={attribute: True}):
        value = element.get(attribute)
        if isinstance(value, list):
            value = " ".join(value)
        if value:
            yield value


def iter_image_references(soup: BeautifulSoup) -> Iterator[str]:
    """Yield raw image references from tag attributes, srcsets and CSS."""
    for tag, attribute in IMAGE_SOURCE_ATTRIBUTES:
        yield from _attribute_values(soup, tag, attribute)

    for attribute in SRCSET_ATTRIBUTES:
        for value in _attribute_values(soup, True, attribute):
            yield from parse_srcset(value)

    for value in _attribute_values(soup, True, "style"):
        yield from extract_css_urls(value)

    for style in soup.find_all("style"):
        yield from extract_css_urls("".join(str(child) for child in style.children))


def iter_link_references(soup: BeautifulSoup) -> Iterator[str]:
    for tag, attribute in LINK_ATTRIBUTES:
        yield from _attribute_values(soup, tag, attribute)


def _resolve_all(references: Iterable[str], page_url: str) -> Iterator[str]:
    for reference in references:
        resolved = resolve_url(reference, page_url)
        if resolved:
            yield resolved


def extract(html: str, page_url: str, base_url: Optional[str] = None) -> Extraction:
    """
    Extract images and navigable links from an HTML document.

    Args:
        html: Document source.
        page_url: URL the document was fetched from; references resolve
                  against it.
        base_url: The crawl's base URL. Links must share its host. Defaults
                  to ``page_url``.

    Returns:
        An Extraction whose images and links are normalized absolute URLs
        without duplicates.
    """
    base_url = base_url or page_url
    soup = BeautifulSoup(html, PARSER)
    result = Extraction()

    for url in _resolve_all(iter_image_references(soup), page_url):
        result.add_image(url)

    for url in _resolve_all(iter_link_references(soup), page_url):
        if same_host(url, base_url) and is_navigable(url):
            result.add_link(url)

    return result
