# src/seo/feeds.py
# RSS, sitemap and robots.txt generation for SuperFacts
# =====================================================

"""
Machine readable listings of the article collection.

All builders are pure over their inputs except for the current time, which
comes from an injectable clock. XML is produced with ElementTree so titles,
summaries and URLs are always escaped.
"""

import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence
from urllib.parse import quote

from src.contracts.article import DEFAULT_ARTICLE_IMAGE, ArticleModel
from src.utils.datetime_utils import format_http_date, to_iso_z, utc_now
from src.utils.logger import get_logger

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
NEWS_NS = "http://www.google.com/schemas/sitemap-news/0.9"
ATOM_NS = "http://www.w3.org/2005/Atom"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

DEFAULT_SEO_SETTINGS: Dict[str, Any] = {
    "site_name": "SuperFacts.fr",
    "site_url": "https://superfacts.fr",
    "organization_logo": "https://superfacts.fr/logo.png",
    "article_default_image": DEFAULT_ARTICLE_IMAGE,
    "rss_max_items": 50,
    "sitemap_article_limit": 50,
    "sitemap_xml_article_limit": 1000,
}


def _sub(parent: ET.Element, tag: str, text: Optional[str] = None, **attrib: str) -> ET.Element:
    element = ET.SubElement(parent, tag, attrib)
    if text is not None:
        element.text = text
    return element


def _serialize(root: ET.Element) -> str:
    ET.indent(root, space="  ")
    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def category_slug(category: str) -> str:
    return quote(category.lower(), safe="")


class SeoFeedGenerator:
    """
    Renders articles into RSS 2.0, sitemap XML, structured sitemap entries
    and robots.txt.

    Args:
        seo_config: site identity and limits, the ``seo`` config section
        clock: returns the current aware UTC datetime
    """

    def __init__(
        self,
        seo_config: Optional[Dict[str, Any]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = {**DEFAULT_SEO_SETTINGS, **(seo_config or {})}
        self.site_url = self.settings["site_url"].rstrip("/")
        self.site_name = self.settings["site_name"]
        self.clock = clock
        self.logger = get_logger().create_module_logger("seo.feeds")

    def article_url(self, article: ArticleModel) -> str:
        return f"{self.site_url}/article/{quote(article.id, safe='')}"

    def category_url(self, category: str) -> str:
        return f"{self.site_url}/category/{category_slug(category)}"

    # RSS
    # ===

    def generate_rss_feed(
        self,
        articles: Sequence[ArticleModel],
        category: Optional[str] = None,
        max_items: Optional[int] = None,
    ) -> str:
        """RSS 2.0 document with at most ``max_items`` items, optionally for one category."""
        if max_items is None:
            max_items = self.settings["rss_max_items"]
        if category:
            wanted = category.lower()
            articles = [article for article in articles if article.category.lower() == wanted]
            title = f"{self.site_name} - {category}"
            description = f"Actualités {category.lower()} en temps réel"
            link = self.category_url(category)
            self_href = f"{self.site_url}/rss/{category_slug(category)}.xml"
        else:
            title = self.site_name
            description = "Actualités françaises en temps réel"
            link = self.site_url
            self_href = f"{self.site_url}/rss.xml"

        rss = ET.Element(
            "rss",
            {"version": "2.0", "xmlns:content": CONTENT_NS, "xmlns:atom": ATOM_NS},
        )
        channel = _sub(rss, "channel")
        _sub(channel, "title", title)
        _sub(channel, "description", description)
        _sub(channel, "link", link)
        _sub(channel, "atom:link", href=self_href, rel="self", type="application/rss+xml")
        _sub(channel, "language", "fr-FR")
        _sub(channel, "lastBuildDate", format_http_date(self.clock()))
        _sub(channel, "ttl", "60")
        image = _sub(channel, "image")
        _sub(image, "url", self.settings["organization_logo"])
        _sub(image, "title", title)
        _sub(image, "link", link)
        _sub(image, "width", "200")
        _sub(image, "height", "60")

        for article in list(articles)[:max_items]:
            self._rss_item(channel, article)
        return _serialize(rss)

    def _rss_item(self, channel: ET.Element, article: ArticleModel) -> None:
        item = _sub(channel, "item")
        url = self.article_url(article)
        _sub(item, "title", article.title)
        _sub(item, "description", article.summary)
        _sub(item, "link", url)
        _sub(item, "guid", url)
        _sub(item, "pubDate", format_http_date(article.published_at))
        _sub(item, "author", article.author)
        _sub(item, "category", article.category)
        _sub(item, "source", article.source, url=article.source_url)
        if article.image_url and article.image_url != self.settings["article_default_image"]:
            _sub(item, "enclosure", url=article.image_url, type="image/jpeg")

    # Sitemaps
    # ========

    def generate_sitemap_xml(
        self,
        articles: Sequence[ArticleModel],
        categories: Iterable[str],
        last_modified: Optional[str] = None,
    ) -> str:
        """Sitemap with the home page, one URL per category and Google News article entries."""
        last_modified = last_modified or to_iso_z(self.clock())
        urlset = ET.Element("urlset", {"xmlns": SITEMAP_NS, "xmlns:news": NEWS_NS})

        self._sitemap_url(urlset, self.site_url, last_modified, "hourly", "1.0")
        for category in categories:
            self._sitemap_url(urlset, self.category_url(category), last_modified, "daily", "0.8")

        for article in list(articles)[: self.settings["sitemap_xml_article_limit"]]:
            url = self._sitemap_url(
                urlset, self.article_url(article), article.publish_date, "monthly", "0.6"
            )
            news = _sub(url, "news:news")
            publication = _sub(news, "news:publication")
            _sub(publication, "news:name", self.site_name)
            _sub(publication, "news:language", "fr")
            _sub(news, "news:publication_date", article.publish_date)
            _sub(news, "news:title", article.title)
            _sub(news, "news:keywords", ", ".join(article.tags))
        return _serialize(urlset)

    @staticmethod
    def _sitemap_url(
        urlset: ET.Element, loc: str, last_modified: str, frequency: str, priority: str
    ) -> ET.Element:
        url = _sub(urlset, "url")
        _sub(url, "loc", loc)
        _sub(url, "lastmod", last_modified)
        _sub(url, "changefreq", frequency)
        _sub(url, "priority", priority)
        return url

    def build_sitemap_entries(
        self,
        load_articles: Callable[[], Sequence[ArticleModel]],
        categories: Iterable[str],
    ) -> List[Dict[str, Any]]:
        """
        Route descriptors ``{url, lastModified, changeFrequency, priority}``.

        Home page first, then the most recent articles (linking to their
        source page), then the fixed category pages. Any failure while
        reading or ordering the articles degrades to the home page alone.
        """
        now = to_iso_z(self.clock())
        root = {
            "url": self.site_url,
            "lastModified": now,
            "changeFrequency": "hourly",
            "priority": 1.0,
        }
        try:
            recent = sorted(load_articles(), key=lambda article: article.published_at, reverse=True)
            article_entries = [
                {
                    "url": article.source_url,
                    "lastModified": article.publish_date,
                    "changeFrequency": "daily",
                    "priority": 0.8,
                }
                for article in recent[: self.settings["sitemap_article_limit"]]
            ]
            category_entries = [
                {
                    "url": f"{self.site_url}/category/{slug}",
                    "lastModified": now,
                    "changeFrequency": "daily",
                    "priority": 0.7,
                }
                for slug in categories
            ]
        except Exception as exc:
            self.logger.warning(
                {"event": "seo.sitemap.degraded", "details": {"error": str(exc)}}
            )
            return [root]
        return [root, *article_entries, *category_entries]

    # robots.txt
    # ==========

    def generate_robots_txt(self) -> str:
        return "\n".join(
            [
                "User-agent: *",
                "Allow: /",
                "Disallow: /admin/",
                "Disallow: /api/",
                "Disallow: /private/",
                "",
                "# Sitemaps",
                f"Sitemap: {self.site_url}/sitemap.xml",
                "",
                "Crawl-delay: 1",
                "",
                "User-agent: Googlebot-News",
                "Allow: /",
                "Crawl-delay: 0",
                "",
                "User-agent: Bingbot",
                "Crawl-delay: 2",
                "",
            ]
        )


__all__ = ["SeoFeedGenerator", "category_slug"]
