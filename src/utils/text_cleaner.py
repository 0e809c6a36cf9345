from __future__ import annotations

import html as _html
import re
import unicodedata
from typing import Iterable

from bs4 import BeautifulSoup


# Trailers French feeds append to their descriptions
_BOILERPLATE_PATTERNS: Iterable[re.Pattern] = [
    re.compile(r"^\s*lire la suite\s*\.*$", re.I),
    re.compile(r"^\s*(continuer|poursuivre) la lecture\s*\.*$", re.I),
    re.compile(r"^\s*(l'article|le post|the post) .* (est apparu en premier sur|appeared first on) .*", re.I),
]


def normalize_text(text: str) -> str:
    if not text:
        return ""
    text = _html.unescape(text)
    text = unicodedata.normalize("NFKC", text)
    text = text.replace("\x00", "").replace("\r", " ").replace("\n", " ")
    return " ".join(text.split()).strip()


def clean_html(html: str) -> str:
    """Strip markup, scripts and feed boilerplate, returning collapsed text."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    for node in list(soup.find_all(string=True)):
        if any(p.search(normalize_text(str(node))) for p in _BOILERPLATE_PATTERNS):
            node.extract()
    return normalize_text(soup.get_text(" "))


def truncate(text: str, max_chars: int, suffix: str = "...") -> str:
    """First ``max_chars`` characters, plus ``suffix`` when something was cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + suffix


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """Substring match of any keyword against lowercased ``text``."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)
