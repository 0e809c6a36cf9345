"""
Storage package: article store backends and JSON document persistence.
"""

from typing import Any, Dict

from .article_store import DEFAULT_MAX_ARTICLES, ArticleStore, JsonArticleStore
from .json_document import JsonDocument, StorageError


def create_article_store(storage_config: Dict[str, Any]) -> ArticleStore:
    """Build the article store selected by ``storage_config['type']``."""
    max_articles = storage_config.get("max_articles", DEFAULT_MAX_ARTICLES)
    if storage_config["type"] == "json":
        return JsonArticleStore(storage_config["articles_path"], max_articles=max_articles)

    from .database import DatabaseManager, SqlArticleStore

    return SqlArticleStore(DatabaseManager(storage_config), max_articles=max_articles)


__all__ = [
    "ArticleStore",
    "JsonArticleStore",
    "JsonDocument",
    "StorageError",
    "create_article_store",
]
