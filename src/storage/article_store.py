"""Article persistence behind a small capability interface.

``ArticleStore`` is what the collector and the API depend on; the JSON
document backend is the default and the SQL backend lives in
``src/storage/database.py``.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from pydantic import ValidationError

from src.contracts.article import ArticleModel
from src.storage.json_document import JsonDocument, StorageError
from src.utils.logger import get_logger

DEFAULT_MAX_ARTICLES = 1000


@runtime_checkable
class ArticleStore(Protocol):
    """Ordered article collection, newest first, keyed by ``id``."""

    max_articles: int

    def exists(self) -> bool:
        """True once the store has been created (first collection run)."""

    def load(self) -> List[ArticleModel]:
        """All stored articles in store order; empty when the store is absent."""

    def append(self, articles: Sequence[ArticleModel]) -> int:
        """Prepend ``articles``, drop the oldest beyond ``max_articles``, return the new total."""

    def find(self, article_id: str) -> Optional[ArticleModel]:
        """The single article with ``article_id``, or None."""

    def replace_all(self, articles: Sequence[ArticleModel]) -> int:
        """Overwrite the whole collection, keeping the given order."""


def _dedupe_ids(articles: Sequence[ArticleModel]) -> List[ArticleModel]:
    seen: set[str] = set()
    unique: List[ArticleModel] = []
    for article in articles:
        if article.id in seen:
            continue
        seen.add(article.id)
        unique.append(article)
    return unique


class JsonArticleStore:
    """Articles kept as a JSON array of camelCase records (``data/articles.json``)."""

    def __init__(self, path: Path | str, max_articles: int = DEFAULT_MAX_ARTICLES):
        self.document = JsonDocument(path)
        self.max_articles = max_articles
        self.logger = get_logger().create_module_logger("storage.articles")

    @property
    def path(self) -> Path:
        return self.document.path

    def exists(self) -> bool:
        return self.document.exists()

    def load(self) -> List[ArticleModel]:
        raw = self.document.read(default=list)
        if not isinstance(raw, list):
            raise StorageError(f"{self.path} must contain a JSON array")
        try:
            return [ArticleModel.model_validate(item) for item in raw]
        except ValidationError as exc:
            raise StorageError(f"{self.path} holds an invalid article: {exc}") from exc

    def append(self, articles: Sequence[ArticleModel]) -> int:
        with self.document.lock:
            # A re-collected id replaces the stored copy
            updated = _dedupe_ids([*articles, *self.load()])[: self.max_articles]
            self._write(updated)
        self.logger.info(
            {
                "event": "storage.articles.appended",
                "details": {"added": len(articles), "total": len(updated)},
            }
        )
        return len(updated)

    def find(self, article_id: str) -> Optional[ArticleModel]:
        return next((article for article in self.load() if article.id == article_id), None)

    def replace_all(self, articles: Sequence[ArticleModel]) -> int:
        with self.document.lock:
            updated = _dedupe_ids(articles)[: self.max_articles]
            self._write(updated)
        return len(updated)

    def _write(self, articles: Sequence[ArticleModel]) -> None:
        self.document.write([article.to_payload() for article in articles])


__all__ = ["ArticleStore", "JsonArticleStore", "StorageError", "DEFAULT_MAX_ARTICLES"]
