# src/services.py
# Process-wide service container for SuperFacts
# =============================================

"""
Builds the store, collector, ad manager and SEO generator once from a
validated ``Config``. The HTTP layer and the CLI receive the resulting
``SiteServices`` instead of constructing components per request.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import requests

from config.settings import storage_settings
from src.ads.manager import AdManager
from src.collectors.news_collector import FrenchNewsCollector
from src.seo.feeds import SeoFeedGenerator
from src.storage import create_article_store
from src.storage.article_store import ArticleStore
from src.utils.datetime_utils import utc_now
from superfacts.config_manager import Config, load_config


@dataclass
class SiteServices:
    config: Config
    store: ArticleStore
    collector: FrenchNewsCollector
    ad_manager: AdManager
    seo: SeoFeedGenerator

    def summary(self) -> Dict[str, Any]:
        """Short description for the startup log line."""
        return {
            "storage": self.config.storage.driver,
            "data_dir": str(self.config.paths.data_dir),
            "sources": len(self.collector.sources),
            "site_url": self.config.seo.site_url,
        }


def build_services(
    config: Optional[Config] = None,
    *,
    sources: Optional[Dict[str, Dict[str, Any]]] = None,
    session: Optional[requests.Session] = None,
    clock: Callable[[], datetime] = utc_now,
) -> SiteServices:
    cfg = config or load_config()
    storage = storage_settings(cfg)
    store = create_article_store(storage)

    collection = cfg.collection.model_dump(mode="python")
    collection["request_timeout"] = collection["request_timeout_seconds"]
    collector = FrenchNewsCollector(
        store,
        sources=sources,
        collection_config=collection,
        news_config=cfg.news.model_dump(mode="python"),
        session=session,
        clock=clock,
    )

    ad_manager = AdManager(
        storage["ads_path"],
        storage["performance_path"],
        tracking_path=cfg.ads.tracking_path,
        sidebar_refresh_seconds=cfg.ads.sidebar_refresh_seconds,
        timezone=cfg.app.timezone,
        clock=clock,
    )

    seo_settings = cfg.seo.model_dump(mode="python")
    seo_settings["article_default_image"] = cfg.collection.default_image
    seo = SeoFeedGenerator(seo_settings, clock=clock)

    return SiteServices(
        config=cfg,
        store=store,
        collector=collector,
        ad_manager=ad_manager,
        seo=seo,
    )


__all__ = ["SiteServices", "build_services"]
