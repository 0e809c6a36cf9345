"""
SEO package: RSS feed, sitemaps and robots.txt.
"""

from .feeds import SeoFeedGenerator, category_slug

__all__ = ["SeoFeedGenerator", "category_slug"]
