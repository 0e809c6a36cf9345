# src/ads/manager.py
# Ad selection, tracking and inventory for SuperFacts
# ===================================================

"""
``AdManager`` owns the ad inventory (``data/ads.json``) and the daily
performance rows (``data/ad-performance.json``).

Serving filters the inventory down to the ads eligible for a placement
request, then draws one at random weighted by its pricing rate and past
click-through rate. Serving counts as an impression. Click and impression
tracking never fail on unknown ids: impressions open a performance row for
the day, clicks only touch an existing one.
"""

import random
import threading
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Union
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from src.ads import analytics
from src.ads.samples import build_sample_ads
from src.contracts.ads import (
    AdPerformance,
    AdPlacement,
    AdRequest,
    AdResponse,
    AdTracking,
    Advertisement,
)
from src.storage.json_document import JsonDocument, StorageError
from src.utils.datetime_utils import utc_now
from src.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from src.utils.logger import SiteLogger

DEFAULT_TRACKING_PATH = "/api/ads/track"
DEFAULT_SIDEBAR_REFRESH_SECONDS = 30


class AdManager:
    """
    Inventory, selection and tracking of advertisements.

    Args:
        ads_path: JSON document holding the inventory
        performance_path: JSON document holding the per day counters
        tracking_path: URL prefix of the tracking routes
        sidebar_refresh_seconds: ``refreshAfter`` hint for sidebar slots
        timezone: zone used for time of day and day of week targeting
        clock: returns the current aware UTC datetime
        rng: random source for the weighted draw
    """

    def __init__(
        self,
        ads_path: Union[Path, str],
        performance_path: Union[Path, str],
        *,
        tracking_path: str = DEFAULT_TRACKING_PATH,
        sidebar_refresh_seconds: int = DEFAULT_SIDEBAR_REFRESH_SECONDS,
        timezone: str = "Europe/Paris",
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
        logger_factory: Optional["SiteLogger"] = None,
    ) -> None:
        self.ads_document = JsonDocument(ads_path)
        self.performance_document = JsonDocument(performance_path)
        self.tracking_path = tracking_path.rstrip("/")
        self.sidebar_refresh_seconds = sidebar_refresh_seconds
        self.zone = ZoneInfo(timezone)
        self.clock = clock
        self.rng = rng or random.Random()
        self.logger = (logger_factory or get_logger()).create_module_logger("ads.manager")

        self._lock = threading.RLock()
        self._ads: List[Advertisement] = []
        self._performance: List[AdPerformance] = []
        self._initialized = False

    # Persistence
    # ===========

    def _ensure_loaded(self) -> None:
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            raw_ads = self.ads_document.read(default=list)
            raw_rows = self.performance_document.read(default=list)
            try:
                self._ads = [Advertisement.model_validate(item) for item in raw_ads]
                self._performance = [AdPerformance.model_validate(item) for item in raw_rows]
            except (TypeError, ValidationError) as exc:
                raise StorageError(f"Invalid ad document: {exc}") from exc
            self._initialized = True
            self.logger.debug(
                {
                    "event": "ads.loaded",
                    "details": {"ads": len(self._ads), "performance_rows": len(self._performance)},
                }
            )

    def _save_ads(self) -> None:
        self.ads_document.write([ad.to_payload() for ad in self._ads])

    def _save_performance(self) -> None:
        self.performance_document.write([row.to_payload() for row in self._performance])

    # Serving
    # =======

    def get_ad(self, request: AdRequest) -> Optional[AdResponse]:
        """Pick an ad for ``request`` and count the impression, or None when nothing fits."""
        self._ensure_loaded()
        now = self.clock()
        eligible = self.eligible_ads(request, now)
        if not eligible:
            self.logger.debug(
                {"event": "ads.get.no_match", "details": {"placement": request.placement.value}}
            )
            return None

        selected = self._select_by_weight(eligible)
        self.track_impression(selected.id)

        refresh_after = None
        if selected.placement == AdPlacement.SIDEBAR:
            refresh_after = self.sidebar_refresh_seconds
        return AdResponse(
            ad=selected,
            tracking=AdTracking(
                impression_url=f"{self.tracking_path}/impression/{selected.id}",
                click_url=f"{self.tracking_path}/click/{selected.id}",
            ),
            refresh_after=refresh_after,
        )

    def eligible_ads(self, request: AdRequest, now: datetime) -> List[Advertisement]:
        self._ensure_loaded()
        local_now = now.astimezone(self.zone)
        minutes_of_day = local_now.hour * 60 + local_now.minute
        # 0 = Sunday
        day_of_week = (local_now.weekday() + 1) % 7
        user = request.user_context

        eligible = []
        for ad in self._ads:
            targeting = ad.targeting
            if not ad.is_running(now):
                continue
            if ad.placement != request.placement:
                continue
            if user.device not in targeting.devices:
                continue
            if user.language not in targeting.languages:
                continue
            if targeting.categories and not set(targeting.categories) & set(user.categories):
                continue
            if targeting.time_of_day and not targeting.time_of_day.contains(minutes_of_day):
                continue
            if targeting.days_of_week and day_of_week not in targeting.days_of_week:
                continue
            if ad.budget_exhausted():
                continue
            eligible.append(ad)
        return eligible

    def _select_by_weight(self, ads: List[Advertisement]) -> Advertisement:
        weights = [ad.pricing.rate * self.performance_multiplier(ad.id) for ad in ads]
        remaining = self.rng.random() * sum(weights)
        for ad, weight in zip(ads, weights):
            remaining -= weight
            if remaining <= 0:
                return ad
        return ads[0]

    def performance_multiplier(self, ad_id: str) -> float:
        """1.5 above 2% average CTR, 1.2 above 1%, else 1."""
        rows = [row for row in self._performance if row.ad_id == ad_id]
        if not rows:
            return 1.0
        average_ctr = sum(row.ctr for row in rows) / len(rows)
        if average_ctr > 0.02:
            return 1.5
        if average_ctr > 0.01:
            return 1.2
        return 1.0

    # Tracking
    # ========

    def _today(self) -> date:
        return self.clock().date()

    def _find_row(self, ad_id: str, day: date) -> Optional[AdPerformance]:
        return next(
            (row for row in self._performance if row.ad_id == ad_id and row.date == day),
            None,
        )

    def _find_ad(self, ad_id: str) -> Optional[Advertisement]:
        return next((ad for ad in self._ads if ad.id == ad_id), None)

    def track_impression(self, ad_id: str) -> None:
        self._ensure_loaded()
        with self._lock:
            today = self._today()
            row = self._find_row(ad_id, today)
            if row is None:
                row = AdPerformance(ad_id=ad_id, date=today)
                self._performance.append(row)
            row.impressions += 1
            if row.clicks:
                row.ctr = row.clicks / row.impressions

            ad = self._find_ad(ad_id)
            if ad is not None:
                ad.campaign.impressions += 1
                self._record_revenue(ad, "impression", row)
            self._save_performance()
            self._save_ads()
        self.logger.debug({"event": "ads.track.impression", "details": {"ad_id": ad_id}})

    def track_click(self, ad_id: str) -> None:
        self._ensure_loaded()
        with self._lock:
            row = self._find_row(ad_id, self._today())
            if row is not None:
                row.clicks += 1
                row.ctr = row.clicks / row.impressions if row.impressions else 0.0

            ad = self._find_ad(ad_id)
            if ad is not None:
                ad.campaign.clicks += 1
                self._record_revenue(ad, "click", row)
            self._save_performance()
            self._save_ads()
        self.logger.debug({"event": "ads.track.click", "details": {"ad_id": ad_id}})

    def _record_revenue(
        self, ad: Advertisement, action: str, row: Optional[AdPerformance]
    ) -> None:
        revenue = 0.0
        if ad.pricing.model == "cpm" and action == "impression":
            revenue = ad.pricing.rate / 1000
        elif ad.pricing.model == "cpc" and action == "click":
            revenue = ad.pricing.rate
        if revenue <= 0:
            return

        ad.campaign.spent_amount += revenue
        if row is not None:
            row.revenue += revenue
            if row.impressions:
                row.cpm = row.revenue / row.impressions * 1000
            if row.clicks:
                row.cpc = row.revenue / row.clicks

    # Inventory
    # =========

    def create_sample_ads(self) -> int:
        """Upsert the demo inventory; calling it twice leaves three sample ads."""
        samples = build_sample_ads(self.clock())
        for ad in samples:
            self.add_ad(ad)
        self.logger.info({"event": "ads.samples.created", "details": {"count": len(samples)}})
        return len(samples)

    def add_ad(self, ad: Advertisement) -> None:
        self._ensure_loaded()
        with self._lock:
            self._ads = [existing for existing in self._ads if existing.id != ad.id]
            self._ads.append(ad)
            self._save_ads()

    def update_ad(self, ad_id: str, updates: Dict[str, Any]) -> bool:
        """Shallow merge of camelCase ``updates`` into the stored ad."""
        self._ensure_loaded()
        with self._lock:
            for index, ad in enumerate(self._ads):
                if ad.id != ad_id:
                    continue
                merged = {**ad.to_payload(), **updates, "id": ad_id, "updatedAt": self.clock()}
                self._ads[index] = Advertisement.model_validate(merged)
                self._save_ads()
                return True
        return False

    def delete_ad(self, ad_id: str) -> bool:
        self._ensure_loaded()
        with self._lock:
            remaining = [ad for ad in self._ads if ad.id != ad_id]
            if len(remaining) == len(self._ads):
                return False
            self._ads = remaining
            self._save_ads()
            return True

    def get_ads(self) -> List[Advertisement]:
        self._ensure_loaded()
        return list(self._ads)

    def get_ad_by_id(self, ad_id: str) -> Optional[Advertisement]:
        self._ensure_loaded()
        return self._find_ad(ad_id)

    # Analytics
    # =========

    def get_performance(
        self,
        ad_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[AdPerformance]:
        self._ensure_loaded()
        rows = self._performance
        if ad_id:
            rows = [row for row in rows if row.ad_id == ad_id]
        if start:
            rows = [row for row in rows if row.date >= start]
        if end:
            rows = [row for row in rows if row.date <= end]
        return list(rows)

    def _analytics_inputs(self, ad_id, start, end):
        rows = self.get_performance(ad_id, start, end)
        ads = self.get_ads()
        if ad_id:
            ads = [ad for ad in ads if ad.id == ad_id]
        return rows, ads

    def summary_analytics(self, ad_id=None, start=None, end=None) -> Dict[str, Any]:
        return analytics.summary_analytics(*self._analytics_inputs(ad_id, start, end))

    def detailed_analytics(self, ad_id=None, start=None, end=None) -> Dict[str, Any]:
        return analytics.detailed_analytics(*self._analytics_inputs(ad_id, start, end))

    def revenue_analytics(self, ad_id=None, start=None, end=None) -> Dict[str, Any]:
        return analytics.revenue_analytics(*self._analytics_inputs(ad_id, start, end))

    def analytics(self, kind: str, ad_id=None, start=None, end=None) -> Dict[str, Any]:
        """Dispatch on ``kind`` (summary, detailed or revenue)."""
        if kind not in analytics.BUILDERS:
            raise ValueError(f"Invalid analytics type: {kind}")
        return analytics.BUILDERS[kind](*self._analytics_inputs(ad_id, start, end))


__all__ = ["AdManager", "DEFAULT_TRACKING_PATH"]
