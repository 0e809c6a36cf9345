import feedparser

from src.collectors.image_extractor import (
    extract_image,
    is_image_url,
    is_large_image,
    is_likely_logo,
)
from src.contracts.article import DEFAULT_ARTICLE_IMAGE


def test_enclosure_has_priority() -> None:
    entry = {
        "enclosures": [{"href": "https://cdn.test/photo.jpg", "type": "image/jpeg"}],
        "media_content": [{"url": "https://cdn.test/media.jpg"}],
    }
    assert extract_image(entry) == "https://cdn.test/photo.jpg"


def test_non_image_enclosure_is_ignored() -> None:
    entry = {
        "enclosures": [{"href": "https://cdn.test/podcast.mp3"}],
        "media_thumbnail": [{"url": "https://cdn.test/thumb"}],
    }
    assert extract_image(entry) == "https://cdn.test/thumb"


def test_media_content_before_html() -> None:
    entry = {
        "media_content": [{"url": "https://cdn.test/media.png?w=800"}],
        "summary": '<img src="https://cdn.test/inline.jpg">',
    }
    assert extract_image(entry) == "https://cdn.test/media.png?w=800"


def test_large_inline_image_preferred_over_small_one() -> None:
    entry = {
        "summary": (
            '<img src="https://cdn.test/pixel.gif" width="1" height="1">'
            '<img data-src="https://cdn.test/hero.jpg" width="800" height="450">'
        )
    }
    assert extract_image(entry) == "https://cdn.test/hero.jpg"


def test_logo_is_skipped_in_last_resort() -> None:
    entry = {
        "summary": (
            '<img src="https://cdn.test/logo.png" width="120" height="40">'
            '<img src="https://cdn.test/chart.png" width="150" height="100">'
        )
    }
    assert extract_image(entry) == "https://cdn.test/chart.png"


def test_publisher_container_and_relative_urls() -> None:
    entry = {
        "content": [
            {"value": '<div class="article-image"><img src="/img/une.jpg"></div>'}
        ]
    }
    assert extract_image(entry, "Le Monde") == "https://www.lemonde.fr/img/une.jpg"


def test_protocol_relative_url_is_resolved() -> None:
    entry = {"summary": '<img src="//cdn.test/photo.webp">'}
    assert extract_image(entry) == "https://cdn.test/photo.webp"


def test_default_image_when_nothing_found() -> None:
    assert extract_image({}) == DEFAULT_ARTICLE_IMAGE
    assert extract_image({"summary": "<p>Pas d'image</p>"}) == DEFAULT_ARTICLE_IMAGE


def test_parsed_feed_entry() -> None:
    feed = feedparser.parse(
        b'<?xml version="1.0"?><rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">'
        b"<channel><title>t</title><item><title>a</title>"
        b'<media:content url="https://cdn.test/from-media.jpg" medium="image"/>'
        b"</item></channel></rss>"
    )
    assert extract_image(feed.entries[0]) == "https://cdn.test/from-media.jpg"


def test_helpers() -> None:
    assert is_image_url("https://cdn.test/a.JPEG")
    assert not is_image_url("https://cdn.test/article.html")
    assert is_large_image(0, 0)
    assert is_large_image(640, 360)
    assert not is_large_image(200, 300)
    assert is_likely_logo("https://cdn.test/static/favicon.png")
