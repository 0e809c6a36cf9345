# src/collectors/news_collector.py
# French RSS news collector for SuperFacts
# ========================================

"""
Fetches the French RSS catalogue, turns feed entries into ``ArticleModel``
records and prepends them to the article store.

Per entry the collector strips HTML, builds a capped summary, assigns a
category and tags by keyword, estimates read time and sentiment and picks an
illustration. Titles close to an already known title are skipped, so running
a collection twice in a row adds nothing the second time.
"""

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import feedparser
import requests
from requests.adapters import HTTPAdapter

from src.collectors.base_collector import BaseCollector
from src.collectors.french_classifier import (
    calculate_read_time,
    categorize_article,
    determine_sentiment,
    generate_tags,
)
from src.collectors.image_extractor import extract_image
from src.contracts.article import DEFAULT_ARTICLE_IMAGE, ArticleModel
from src.storage.article_store import ArticleStore
from src.storage.json_document import StorageError
from src.utils.datetime_utils import parse_to_utc_with_tzinfo, to_iso_z, utc_now
from src.utils.dedupe import is_duplicate_title, normalize_title
from src.utils.text_cleaner import clean_html, truncate

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from src.utils.logger import SiteLogger

EMPTY_CONTENT_PLACEHOLDER = "Contenu indisponible"

DEFAULT_COLLECTION_SETTINGS: Dict[str, Any] = {
    "items_per_source": 8,
    "request_timeout": 15,
    "user_agent": "SuperFactsBot/1.0 (+https://superfacts.fr)",
    "duplicate_similarity_threshold": 0.8,
    "summary_max_chars": 300,
    "words_per_minute": 200,
    "max_tags": 6,
    "default_image": DEFAULT_ARTICLE_IMAGE,
}

DEFAULT_NEWS_SETTINGS: Dict[str, Any] = {
    "hot_limit": 20,
    "hot_window_hours": 24,
}


@dataclass
class CollectionResult:
    """Outcome of one ``collect_news`` run."""

    new_articles: int
    total_articles: int
    articles: List[ArticleModel] = field(default_factory=list)
    source_results: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"newArticles": self.new_articles, "totalArticles": self.total_articles}


class FrenchNewsCollector(BaseCollector):
    """
    Collector and read API over the article store.

    Args:
        store: article store shared with the HTTP layer
        sources: source catalogue, ``{source_id: {name, url, category, ...}}``
        collection_config: collection knobs, the ``collection`` config section
        news_config: hot news window and default limit, the ``news`` section
        session: HTTP session; a pooled ``requests.Session`` by default
        clock: returns the current aware UTC datetime
    """

    def __init__(
        self,
        store: ArticleStore,
        sources: Optional[Dict[str, Dict[str, Any]]] = None,
        collection_config: Optional[Dict[str, Any]] = None,
        news_config: Optional[Dict[str, Any]] = None,
        session: Optional[requests.Session] = None,
        logger_factory: Optional["SiteLogger"] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(logger_factory)
        if sources is None:
            from config.sources import ALL_SOURCES

            sources = ALL_SOURCES
        self.store = store
        self.sources = sources
        self.settings = {**DEFAULT_COLLECTION_SETTINGS, **(collection_config or {})}
        self.news_settings = {**DEFAULT_NEWS_SETTINGS, **(news_config or {})}
        self.session = session or self._create_session()
        self.clock = clock

        # Run state, reset by collect_news; runs and rewrites hold _run_lock
        self._run_lock = threading.Lock()
        self._known_titles: List[str] = []
        self._pending: List[ArticleModel] = []
        self._next_id = 0

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(
            {
                "User-Agent": self.settings["user_agent"],
                "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml",
                "Accept-Language": "fr-FR,fr;q=0.9,en;q=0.5",
            }
        )
        adapter = HTTPAdapter(pool_connections=10, pool_maxsize=20)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    # Read side
    # =========

    def get_articles(self) -> List[ArticleModel]:
        """Every stored article, newest first; empty when nothing was collected yet."""
        if not self.store.exists():
            return []
        return self.store.load()

    def get_articles_by_category(self, category: str) -> List[ArticleModel]:
        wanted = category.lower()
        return [article for article in self.get_articles() if article.category.lower() == wanted]

    def get_hot_news(self, limit: Optional[int] = None) -> List[ArticleModel]:
        """Articles flagged hot or published inside the hot window, in store order."""
        if limit is None:
            limit = self.news_settings["hot_limit"]
        cutoff = self.clock() - timedelta(hours=self.news_settings["hot_window_hours"])
        hot = [
            article
            for article in self.get_articles()
            if article.is_hot or article.published_at > cutoff
        ]
        return hot[:limit]

    # Collection
    # ==========

    def collect_news(self) -> CollectionResult:
        """Collect every source, prepend the new articles and report the totals.

        Overlapping calls on one collector run one after the other.
        """
        with self._run_lock:
            return self._run_collection()

    def _run_collection(self) -> CollectionResult:
        try:
            existing = self.get_articles()
        except StorageError as exc:
            self._emit_log(
                "warning",
                "collector.store.unreadable",
                details={"error": str(exc)},
            )
            existing = []

        self._known_titles = [normalize_title(article.title) for article in existing]
        self._pending = []
        self._next_id = self._first_free_id(existing)

        source_results = self.collect_from_multiple_sources(self.sources)

        new_articles = sorted(self._pending, key=lambda article: article.published_at, reverse=True)
        total = self.store.append(new_articles)
        self._pending = []

        self._emit_log(
            "info",
            "collector.run.completed",
            details={
                "new_articles": len(new_articles),
                "total_articles": total,
                "sources_failed": self.stats["total_errors"],
            },
        )
        return CollectionResult(
            new_articles=len(new_articles),
            total_articles=total,
            articles=new_articles,
            source_results=source_results,
        )

    def collect_from_source(self, source_id: str, source_config: Dict[str, Any]) -> Dict[str, Any]:
        start_time = time.time()
        stats: Dict[str, Any] = {
            "source_id": source_id,
            "success": False,
            "articles_found": 0,
            "articles_saved": 0,
            "error_message": None,
            "processing_time": 0.0,
        }

        self._emit_log(
            "debug",
            "collector.fetch.start",
            source_id=source_id,
            details={"source_name": source_config.get("name"), "url": source_config.get("url")},
        )
        try:
            parsed_feed = self._fetch_feed(source_config["url"])
        except requests.RequestException as exc:
            stats["error_message"] = f"Feed unavailable: {exc}"
            stats["processing_time"] = time.time() - start_time
            self._emit_log(
                "warning",
                "collector.feed.unavailable",
                source_id=source_id,
                details={"url": source_config.get("url"), "error": str(exc)},
            )
            return stats

        if parsed_feed.bozo and not parsed_feed.entries:
            stats["error_message"] = f"Malformed feed: {parsed_feed.get('bozo_exception')}"
            stats["processing_time"] = time.time() - start_time
            self._emit_log(
                "warning",
                "collector.feed.malformed",
                source_id=source_id,
                details={"error": str(parsed_feed.get("bozo_exception"))},
            )
            return stats

        entries = parsed_feed.entries[: self.settings["items_per_source"]]
        stats["articles_found"] = len(entries)
        for entry in entries:
            article = self._process_entry(entry, source_config)
            if article is None:
                continue
            self._pending.append(article)
            self._known_titles.append(normalize_title(article.title))
            stats["articles_saved"] += 1

        stats["success"] = True
        stats["processing_time"] = time.time() - start_time
        self._emit_log(
            "info",
            "collector.source.completed",
            source_id=source_id,
            latency=stats["processing_time"],
            details={"found": stats["articles_found"], "kept": stats["articles_saved"]},
        )
        return stats

    def _fetch_feed(self, feed_url: str) -> feedparser.FeedParserDict:
        response = self.session.get(feed_url, timeout=self.settings["request_timeout"])
        response.raise_for_status()
        return feedparser.parse(response.content)

    def _process_entry(self, entry: Dict[str, Any], source_config: Dict[str, Any]) -> Optional[ArticleModel]:
        title = clean_html(entry.get("title") or "")
        if not title:
            return None
        if is_duplicate_title(
            title, self._known_titles, self.settings["duplicate_similarity_threshold"]
        ):
            self._emit_log(
                "debug",
                "collector.article.duplicate",
                details={"title": title, "source": source_config.get("name")},
            )
            return None

        content = clean_html(self._entry_text(entry))
        if content:
            summary = truncate(content, self.settings["summary_max_chars"])
        else:
            content = summary = EMPTY_CONTENT_PLACEHOLDER

        category = categorize_article(title, content, source_config.get("category", ""))
        published, _ = parse_to_utc_with_tzinfo(
            entry.get("published_parsed") or entry.get("updated_parsed") or self.clock()
        )
        image_url = extract_image(entry, source_config.get("name", ""))
        if image_url == DEFAULT_ARTICLE_IMAGE:
            image_url = self.settings["default_image"]

        article = ArticleModel(
            id=self._allocate_id(),
            title=title,
            summary=summary,
            content=content,
            author=source_config.get("name", ""),
            publish_date=to_iso_z(published),
            category=category,
            image_url=image_url,
            tags=generate_tags(title, content, category, self.settings["max_tags"]),
            source_url=entry.get("link") or "",
            source=source_config.get("name", ""),
            is_hot=True,
            sentiment=determine_sentiment(title, content),
            read_time=calculate_read_time(content, self.settings["words_per_minute"]),
        )
        return article

    @staticmethod
    def _entry_text(entry: Dict[str, Any]) -> str:
        # content:encoded first, then description
        for block in entry.get("content") or []:
            if block.get("value"):
                return block["value"]
        return entry.get("summary") or entry.get("description") or ""

    def _first_free_id(self, existing: List[ArticleModel]) -> int:
        """Millisecond clock, bumped past any numeric id already stored."""
        candidate = int(self.clock().timestamp() * 1000)
        numeric_ids = [int(article.id) for article in existing if article.id.isdigit()]
        if numeric_ids:
            candidate = max(candidate, max(numeric_ids) + 1)
        return candidate

    def _allocate_id(self) -> str:
        article_id = str(self._next_id)
        self._next_id += 1
        return article_id

    # Maintenance
    # ===========

    def recategorize(self) -> Dict[str, int]:
        """Re-run category and tag assignment over every stored article."""
        with self._run_lock:
            return self._recategorize_stored()

    def _recategorize_stored(self) -> Dict[str, int]:
        articles = self.get_articles()
        updated: List[ArticleModel] = []
        changed = 0
        for article in articles:
            category = categorize_article(article.title, article.content, article.category)
            tags = generate_tags(article.title, article.content, category, self.settings["max_tags"])
            if category != article.category or tags != article.tags:
                changed += 1
                article = article.model_copy(update={"category": category, "tags": tags})
            updated.append(article)

        if changed:
            self.store.replace_all(updated)
        self._emit_log(
            "info",
            "collector.recategorize.completed",
            details={"total": len(articles), "changed": changed},
        )
        return {"total": len(articles), "changed": changed}


__all__ = ["CollectionResult", "FrenchNewsCollector", "EMPTY_CONTENT_PLACEHOLDER"]
