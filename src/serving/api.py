"""HTTP API surface: articles, news, collection, ads and SEO feeds."""

from __future__ import annotations

import time
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request
from fastapi.responses import PlainTextResponse, Response
from pydantic import ValidationError as ModelValidationError

from config.sources import SITEMAP_CATEGORIES
from src.ads.analytics import ANALYTICS_TYPES
from src.contracts.ads import AdRequest, Advertisement
from src.serving import errors
from src.serving.errors import register_error_handlers, route_guard
from src.serving.pagination import has_more, paginate
from src.services import SiteServices, build_services
from src.utils.datetime_utils import parse_iso, to_iso_z, utc_now
from src.utils.logger import get_logger

# 1x1 transparent GIF returned by impression pixels
TRANSPARENT_GIF = bytes(
    [
        0x47, 0x49, 0x46, 0x38, 0x39, 0x61, 0x01, 0x00, 0x01, 0x00, 0x80, 0x00,
        0x00, 0xFF, 0xFF, 0xFF, 0x00, 0x00, 0x00, 0x21, 0xF9, 0x04, 0x01, 0x00,
        0x00, 0x00, 0x00, 0x2C, 0x00, 0x00, 0x00, 0x00, 0x01, 0x00, 0x01, 0x00,
        0x00, 0x02, 0x02, 0x04, 0x01, 0x00, 0x3B,
    ]
)
PIXEL_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

AD_REQUEST_FIELDS = ("placement", "userContext", "slotInfo")
AD_CREATE_FIELDS = (
    "type",
    "title",
    "content",
    "targetUrl",
    "advertiser",
    "campaign",
    "targeting",
    "placement",
    "pricing",
)

logger = get_logger().create_module_logger("serving.api")


def get_services(request: Request) -> SiteServices:
    return request.app.state.services


def _model_error(prefix: str, exc: ModelValidationError) -> errors.ValidationError:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    detail = first.get("msg", "invalid value")
    return errors.ValidationError(f"{prefix}: {location} {detail}".strip())


def _parse_day(value: Optional[str], name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso(value).date()
    except (ValueError, OverflowError) as exc:
        raise errors.ValidationError(f"Invalid {name}") from exc


def _require_ad_id(ad_id: Optional[str]) -> str:
    if ad_id is None or not ad_id.strip():
        raise errors.ValidationError("Ad ID is required")
    return ad_id


def _build_api_router() -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "timestamp": to_iso_z(utc_now()), "message": "API is healthy"}

    # Articles and news
    # =================

    @router.get("/articles/{article_id}")
    def get_article(article_id: str, services: SiteServices = Depends(get_services)):
        with route_guard(logger, "api.article.failed", "Internal server error"):
            if not services.store.exists():
                raise errors.NotFoundError("Articles file not found")
            article = services.store.find(article_id)
            if article is None:
                raise errors.NotFoundError("Article not found")
            return {"success": True, "article": article.to_payload()}

    @router.get("/news")
    def list_news(
        category: Optional[str] = Query(None),
        limit: Optional[int] = Query(None, ge=1),
        page: int = Query(1, ge=1),
        hot: Optional[str] = Query(None),
        services: SiteServices = Depends(get_services),
    ):
        with route_guard(
            logger, "api.news.failed", "Erreur lors de la récupération des actualités"
        ):
            limit = limit or services.config.news.default_limit
            collector = services.collector
            if hot == "true":
                articles = collector.get_hot_news(limit)
                total_available = len(articles)
            else:
                if category:
                    candidates = collector.get_articles_by_category(category)
                else:
                    candidates = collector.get_articles()
                total_available = len(candidates)
                articles = paginate(candidates, page, limit)
            return {
                "success": True,
                "articles": [article.to_payload() for article in articles],
                "total": len(articles),
                "totalAvailable": total_available,
                "page": page,
                "limit": limit,
                "hasMore": has_more(total_available, page, limit),
            }

    @router.post("/collect")
    def trigger_collection(services: SiteServices = Depends(get_services)):
        with route_guard(
            logger, "api.collect.failed", "Erreur lors de la collecte des actualités"
        ):
            result = services.collector.collect_news()
            return {
                "success": True,
                "message": "Collecte terminée avec succès",
                "data": result.to_payload(),
            }

    @router.get("/collect")
    def describe_collection() -> Dict[str, Any]:
        return {
            "message": "Utilisez POST pour déclencher la collecte d'actualités",
            "endpoints": {
                "collect": "POST /api/collect",
                "news": "GET /api/news?category=&limit=&hot=",
            },
        }

    @router.get("/sitemap")
    def sitemap_entries(services: SiteServices = Depends(get_services)) -> List[Dict[str, Any]]:
        return services.seo.build_sitemap_entries(
            services.collector.get_articles, SITEMAP_CATEGORIES
        )

    # Ads
    # ===

    @router.post("/ads/get")
    def get_ad(
        payload: Dict[str, Any] = Body(...),
        services: SiteServices = Depends(get_services),
    ):
        if any(not payload.get(field) for field in AD_REQUEST_FIELDS):
            raise errors.ValidationError("Missing required fields")
        try:
            ad_request = AdRequest.model_validate(payload)
        except ModelValidationError as exc:
            raise _model_error("Invalid ad request", exc) from exc

        with route_guard(logger, "api.ads.get.failed", "Failed to serve ad"):
            response = services.ad_manager.get_ad(ad_request)
            if response is None:
                return {
                    "success": True,
                    "ad": None,
                    "message": "No ads available for this request",
                }
            return {"success": True, "ad": response.to_payload()}

    @router.post("/ads/init")
    def init_ads(services: SiteServices = Depends(get_services)):
        with route_guard(logger, "api.ads.init.failed", "Failed to create sample ads"):
            services.ad_manager.create_sample_ads()
            return {"success": True, "message": "Sample ads created successfully"}

    def track_click(request: Request, ad_id: Optional[str] = None):
        ad_id = _require_ad_id(ad_id)
        services = get_services(request)
        with route_guard(logger, "api.ads.track.click.failed", "Failed to track click"):
            services.ad_manager.track_click(ad_id)
        return {"success": True}

    def track_impression(request: Request, ad_id: Optional[str] = None):
        ad_id = _require_ad_id(ad_id)
        services = get_services(request)
        with route_guard(
            logger, "api.ads.track.impression.failed", "Failed to track impression"
        ):
            services.ad_manager.track_impression(ad_id)
        if request.method == "GET":
            return Response(content=TRANSPARENT_GIF, media_type="image/gif", headers=PIXEL_HEADERS)
        return {"success": True}

    for kind, handler in (("click", track_click), ("impression", track_impression)):
        router.add_api_route(
            f"/ads/track/{kind}/{{ad_id}}", handler, methods=["GET", "POST"], name=f"track_{kind}"
        )
        # Without an id the request is rejected rather than unmatched
        for bare in (f"/ads/track/{kind}", f"/ads/track/{kind}/"):
            router.add_api_route(
                bare, handler, methods=["GET", "POST"], name=f"track_{kind}_missing_id"
            )

    @router.get("/ads/manage")
    def list_ads(
        ad_id: Optional[str] = Query(None, alias="id"),
        services: SiteServices = Depends(get_services),
    ):
        with route_guard(logger, "api.ads.manage.get.failed", "Failed to get ads"):
            if ad_id:
                ad = services.ad_manager.get_ad_by_id(ad_id)
                if ad is None:
                    raise errors.NotFoundError("Ad not found")
                return {"success": True, "ad": ad.to_payload()}
            return {"success": True, "ads": [ad.to_payload() for ad in services.ad_manager.get_ads()]}

    @router.post("/ads/manage")
    def create_ad(
        payload: Dict[str, Any] = Body(...),
        services: SiteServices = Depends(get_services),
    ):
        for field in AD_CREATE_FIELDS:
            if not payload.get(field):
                raise errors.ValidationError(f"Missing required field: {field}")

        now = utc_now()
        data = {
            **payload,
            "id": f"ad-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}",
            "campaign": {
                **payload["campaign"],
                "spentAmount": 0,
                "impressions": 0,
                "clicks": 0,
                "conversions": 0,
            },
            "status": payload.get("status") or "pending",
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            ad = Advertisement.model_validate(data)
        except ModelValidationError as exc:
            raise _model_error("Invalid ad", exc) from exc

        with route_guard(logger, "api.ads.manage.create.failed", "Failed to create ad"):
            services.ad_manager.add_ad(ad)
            return {"success": True, "ad": ad.to_payload()}

    @router.put("/ads/manage")
    def update_ad(
        payload: Dict[str, Any] = Body(...),
        services: SiteServices = Depends(get_services),
    ):
        updates = dict(payload)
        ad_id = updates.pop("id", None)
        if not ad_id:
            raise errors.ValidationError("Ad ID is required")
        with route_guard(logger, "api.ads.manage.update.failed", "Failed to update ad"):
            try:
                updated = services.ad_manager.update_ad(ad_id, updates)
            except ModelValidationError as exc:
                raise _model_error("Invalid ad", exc) from exc
        if not updated:
            raise errors.NotFoundError("Ad not found")
        return {"success": True}

    @router.delete("/ads/manage")
    def delete_ad(
        ad_id: Optional[str] = Query(None, alias="id"),
        services: SiteServices = Depends(get_services),
    ):
        if not ad_id:
            raise errors.ValidationError("Ad ID is required")
        with route_guard(logger, "api.ads.manage.delete.failed", "Failed to delete ad"):
            deleted = services.ad_manager.delete_ad(ad_id)
        if not deleted:
            raise errors.NotFoundError("Ad not found")
        return {"success": True}

    @router.get("/ads/analytics")
    def ad_analytics(
        ad_id: Optional[str] = Query(None, alias="adId"),
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
        kind: str = Query("summary", alias="type"),
        services: SiteServices = Depends(get_services),
    ):
        if kind not in ANALYTICS_TYPES:
            raise errors.ValidationError("Invalid analytics type")
        start = _parse_day(start_date, "startDate")
        end = _parse_day(end_date, "endDate")
        with route_guard(logger, "api.ads.analytics.failed", "Failed to get analytics"):
            data = services.ad_manager.analytics(kind, ad_id=ad_id, start=start, end=end)
            return {"success": True, "data": data}

    return router


def _build_feed_router() -> APIRouter:
    router = APIRouter()

    @router.get("/rss.xml")
    def rss_feed(
        category: Optional[str] = Query(None),
        services: SiteServices = Depends(get_services),
    ):
        try:
            xml = services.seo.generate_rss_feed(services.collector.get_articles(), category)
        except Exception as exc:
            logger.opt(exception=exc).error(
                {"event": "api.rss.failed", "details": {"error": str(exc)}}
            )
            return PlainTextResponse("Error generating RSS feed", status_code=500)
        return Response(
            content=xml,
            media_type="application/rss+xml; charset=utf-8",
            headers={"Cache-Control": f"public, max-age={services.config.seo.rss_cache_seconds}"},
        )

    @router.get("/sitemap.xml")
    def sitemap_xml(services: SiteServices = Depends(get_services)):
        try:
            articles = services.collector.get_articles()
            categories = list(dict.fromkeys(article.category for article in articles))
            xml = services.seo.generate_sitemap_xml(articles, categories)
        except Exception as exc:
            logger.opt(exception=exc).error(
                {"event": "api.sitemap.failed", "details": {"error": str(exc)}}
            )
            return PlainTextResponse("Error generating sitemap", status_code=500)
        return Response(
            content=xml,
            media_type="application/xml",
            headers={
                "Cache-Control": f"public, max-age={services.config.seo.sitemap_cache_seconds}"
            },
        )

    @router.get("/robots.txt", response_class=PlainTextResponse)
    def robots_txt(services: SiteServices = Depends(get_services)) -> str:
        return services.seo.generate_robots_txt()

    return router


def create_app(services: Optional[SiteServices] = None) -> FastAPI:
    """Create a configured FastAPI application around ``services``."""

    services = services or build_services()
    app = FastAPI(title="SuperFacts API", version="1.0.0")
    app.state.services = services
    register_error_handlers(app)

    app.include_router(_build_api_router(), prefix=services.config.server.api_prefix.rstrip("/"))
    app.include_router(_build_feed_router())
    return app


__all__ = ["TRANSPARENT_GIF", "create_app"]
