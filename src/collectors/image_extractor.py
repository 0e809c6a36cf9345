"""Pick an illustration for a feed entry."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional

from bs4 import BeautifulSoup

from config.sources import get_source_domain
from src.contracts.article import DEFAULT_ARTICLE_IMAGE

_IMAGE_URL = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg)(\?|$)", re.I)
_LOGO_MARKERS = ("/logo", "logo.", "avatar", "icon", "favicon", "badge")

# Containers some publishers wrap their lead image in
_SOURCE_SELECTORS = {
    "monde": ".article-image img, .article__media img, .fig__media img",
    "figaro": ".fig-media img, .article-media img",
    "libération": ".article-image img, .media img",
    "liberation": ".article-image img, .media img",
}


def is_image_url(url: str) -> bool:
    return bool(_IMAGE_URL.search(url or ""))


def is_valid_image_url(url: str) -> bool:
    return url.startswith("http") and is_image_url(url)


def is_large_image(width: int, height: int) -> bool:
    """Images without declared dimensions count as large."""
    if width == 0 and height == 0:
        return True
    return width > 200 and height > 150


def is_likely_logo(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in _LOGO_MARKERS)


def _dimension(value: Any) -> int:
    try:
        return int(str(value or "0").strip().rstrip("px") or 0)
    except ValueError:
        return 0


def _resolve(src: str, source_name: str) -> str:
    if src.startswith("//"):
        return "https:" + src
    if src.startswith("/"):
        domain = get_source_domain(source_name)
        if domain:
            return domain + src
    return src


def _first_url(items: Iterable[Mapping[str, Any]], key: str = "url") -> Optional[str]:
    for item in items or []:
        url = item.get(key)
        if url:
            return url
    return None


def _entry_html(entry: Mapping[str, Any]) -> str:
    contents = entry.get("content") or []
    for block in contents:
        value = block.get("value")
        if value:
            return value
    return entry.get("summary") or entry.get("description") or ""


def extract_image(entry: Mapping[str, Any], source_name: str = "") -> str:
    """
    Image URL for a feedparser entry.

    Looks at, in order: the enclosure, ``media:content``, ``media:thumbnail``,
    publisher specific containers, the first large ``<img>`` of the entry
    HTML and finally any ``<img>`` that does not look like a logo. Falls back
    to the site default image.
    """
    for enclosure in entry.get("enclosures") or []:
        url = enclosure.get("href") or enclosure.get("url")
        if url and is_image_url(url):
            return url

    media_url = _first_url(entry.get("media_content") or [])
    if media_url and is_image_url(media_url):
        return media_url

    thumbnail = _first_url(entry.get("media_thumbnail") or [])
    if thumbnail:
        return thumbnail

    html = _entry_html(entry)
    if not html:
        return DEFAULT_ARTICLE_IMAGE

    soup = BeautifulSoup(html, "html.parser")
    lowered_source = source_name.lower()
    for marker, selector in _SOURCE_SELECTORS.items():
        if marker in lowered_source:
            tag = soup.select_one(selector)
            if tag is not None and tag.get("src"):
                return _resolve(tag["src"], source_name)

    images = soup.find_all("img")
    for img in images:
        src = img.get("src") or img.get("data-src") or img.get("data-lazy-src")
        if not src:
            continue
        src = _resolve(src, source_name)
        if is_valid_image_url(src) and is_large_image(
            _dimension(img.get("width")), _dimension(img.get("height"))
        ):
            return src

    for img in images:
        src = img.get("src") or img.get("data-src")
        if not src:
            continue
        src = _resolve(src, source_name)
        if is_valid_image_url(src) and not is_likely_logo(src):
            return src

    return DEFAULT_ARTICLE_IMAGE
