"""Shared contracts for validated payloads."""

from .ads import (
    AdPerformance,
    AdPlacement,
    AdRequest,
    AdResponse,
    AdStatus,
    AdType,
    Advertisement,
)
from .article import DEFAULT_ARTICLE_IMAGE, ArticleModel, ArticlePayload

__all__ = [
    "AdPerformance",
    "AdPlacement",
    "AdRequest",
    "AdResponse",
    "AdStatus",
    "AdType",
    "Advertisement",
    "ArticleModel",
    "ArticlePayload",
    "DEFAULT_ARTICLE_IMAGE",
]
