"""Near-duplicate title detection based on Levenshtein similarity."""

from __future__ import annotations

from typing import Iterable

from rapidfuzz.distance import Levenshtein

from src.utils.text_cleaner import clean_html

TITLE_SIMILARITY_THRESHOLD_DEFAULT = 0.8


def normalize_title(title: str) -> str:
    return clean_html(title or "").lower()


def title_similarity(a: str, b: str) -> float:
    """``(len(longer) - distance) / len(longer)``; two empty strings score 1.0."""
    return Levenshtein.normalized_similarity(a, b)


def is_duplicate_title(
    title: str,
    existing_titles: Iterable[str],
    threshold: float = TITLE_SIMILARITY_THRESHOLD_DEFAULT,
) -> bool:
    """True when ``title`` is strictly more than ``threshold`` similar to any existing title.

    ``existing_titles`` are expected to be normalized with ``normalize_title``.
    """
    candidate = normalize_title(title)
    return any(title_similarity(candidate, existing) > threshold for existing in existing_titles)
