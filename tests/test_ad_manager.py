from __future__ import annotations

import json
import random
from datetime import date, datetime, timedelta, timezone

import pytest

from src.ads import AdManager, build_sample_ads
from src.contracts.ads import AdRequest, Advertisement
from src.storage import StorageError

# Monday 2024-05-06, 12:00 in Paris
NOW = datetime(2024, 5, 6, 10, 0, tzinfo=timezone.utc)


def _request(placement: str = "header", device: str = "desktop", **context) -> AdRequest:
    user_context = {"language": "fr", "device": device, "categories": ["tech"], **context}
    return AdRequest.model_validate(
        {
            "placement": placement,
            "userContext": user_context,
            "slotInfo": {
                "id": f"slot-{placement}",
                "placement": placement,
                "dimensions": {"width": 300, "height": 250},
            },
        }
    )


def _ad(ad_id: str, **overrides) -> Advertisement:
    data = {
        "id": ad_id,
        "type": "banner",
        "title": f"Annonce {ad_id}",
        "content": "Contenu",
        "targetUrl": "https://example.com",
        "advertiser": {"name": f"Annonceur {ad_id}"},
        "campaign": {"budget": 100, "endDate": NOW + timedelta(days=10)},
        "targeting": {"languages": ["fr"], "devices": ["desktop", "mobile"]},
        "placement": "header",
        "pricing": {"model": "cpm", "rate": 2.0},
        "status": "active",
        "startDate": NOW - timedelta(days=1),
        "endDate": NOW + timedelta(days=10),
    }
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(data.get(key), dict):
            data[key] = {**data[key], **value}
        else:
            data[key] = value
    return Advertisement.model_validate(data)


@pytest.fixture()
def manager(tmp_path) -> AdManager:
    return AdManager(
        tmp_path / "ads.json",
        tmp_path / "ad-performance.json",
        clock=lambda: NOW,
        rng=random.Random(7),
    )


def test_sample_ads_are_idempotent(manager) -> None:
    assert manager.create_sample_ads() == 3
    manager.create_sample_ads()
    ads = manager.get_ads()
    assert sorted(ad.id for ad in ads) == [
        "sample-banner-1",
        "sample-mobile-sticky-1",
        "sample-sidebar-1",
    ]
    banner = manager.get_ad_by_id("sample-banner-1")
    assert banner.end_date == NOW + timedelta(days=30)
    assert banner.advertiser.is_verified is True


def test_build_sample_ads_dates() -> None:
    ads = {ad.id: ad for ad in build_sample_ads(NOW)}
    assert ads["sample-sidebar-1"].end_date - NOW == timedelta(days=45)
    assert ads["sample-mobile-sticky-1"].campaign.end_date - NOW == timedelta(days=20)


def test_inventory_is_persisted_in_camel_case(manager, tmp_path) -> None:
    manager.add_ad(_ad("a"))
    stored = json.loads((tmp_path / "ads.json").read_text(encoding="utf-8"))
    assert stored[0]["targetUrl"] == "https://example.com"
    assert stored[0]["campaign"]["spentAmount"] == 0.0

    reloaded = AdManager(tmp_path / "ads.json", tmp_path / "ad-performance.json")
    assert [ad.id for ad in reloaded.get_ads()] == ["a"]


@pytest.mark.parametrize(
    "overrides, request_kwargs",
    [
        ({"status": "paused"}, {}),
        ({"startDate": NOW + timedelta(days=1)}, {}),
        ({"endDate": NOW - timedelta(hours=1)}, {}),
        ({"placement": "footer"}, {}),
        ({}, {"device": "tablet"}),
        ({}, {"language": "en"}),
        ({"targeting": {"categories": ["sport"]}}, {}),
        ({"targeting": {"timeOfDay": {"start": "18:00", "end": "23:00"}}}, {}),
        ({"targeting": {"daysOfWeek": [0, 6]}}, {}),
        ({"campaign": {"spentAmount": 100}}, {}),
        ({"targeting": {"devices": []}}, {}),
    ],
)
def test_ineligible_ads_are_filtered(manager, overrides, request_kwargs) -> None:
    manager.add_ad(_ad("a", **overrides))
    assert manager.eligible_ads(_request(**request_kwargs), NOW) == []
    assert manager.get_ad(_request(**request_kwargs)) is None


def test_eligible_targeting_in_site_time(manager) -> None:
    manager.add_ad(
        _ad(
            "a",
            targeting={
                "categories": ["tech", "sport"],
                # 12:00 Paris while UTC is 10:00
                "timeOfDay": {"start": "11:30", "end": "12:30"},
                "daysOfWeek": [1],
            },
        )
    )
    assert [ad.id for ad in manager.eligible_ads(_request(), NOW)] == ["a"]


def test_get_ad_counts_impression_and_builds_tracking(manager) -> None:
    manager.add_ad(_ad("a"))
    response = manager.get_ad(_request())
    assert response.ad.id == "a"
    assert response.tracking.impression_url == "/api/ads/track/impression/a"
    assert response.tracking.click_url == "/api/ads/track/click/a"
    assert response.refresh_after is None

    rows = manager.get_performance("a")
    assert len(rows) == 1
    assert rows[0].date == date(2024, 5, 6)
    assert rows[0].impressions == 1
    assert manager.get_ad_by_id("a").campaign.impressions == 1


def test_sidebar_refresh_hint(tmp_path) -> None:
    manager = AdManager(
        tmp_path / "ads.json",
        tmp_path / "perf.json",
        clock=lambda: NOW,
        sidebar_refresh_seconds=45,
        tracking_path="/track/",
    )
    manager.add_ad(_ad("s", placement="sidebar"))
    response = manager.get_ad(_request("sidebar"))
    assert response.refresh_after == 45
    assert response.tracking.click_url == "/track/click/s"


def test_weighted_selection_is_deterministic_with_seeded_rng(tmp_path) -> None:
    picks = []
    for _ in range(2):
        manager = AdManager(
            tmp_path / "ads.json",
            tmp_path / "perf.json",
            clock=lambda: NOW,
            rng=random.Random(3),
        )
        manager.add_ad(_ad("cheap", pricing={"rate": 0.1}))
        manager.add_ad(_ad("premium", pricing={"rate": 50.0}))
        picks.append(manager._select_by_weight(manager.eligible_ads(_request(), NOW)).id)
    assert picks[0] == picks[1]


def test_zero_weights_fall_back_to_first_ad(manager) -> None:
    manager.add_ad(_ad("free-1", pricing={"rate": 0}))
    manager.add_ad(_ad("free-2", pricing={"rate": 0}))
    assert manager.get_ad(_request()).ad.id == "free-1"


def test_cpm_and_cpc_revenue(manager) -> None:
    manager.add_ad(_ad("cpm", pricing={"model": "cpm", "rate": 4.0}))
    manager.add_ad(
        _ad("cpc", pricing={"model": "cpc", "rate": 0.5}, placement="sidebar")
    )

    manager.track_impression("cpm")
    manager.track_click("cpm")
    cpm_row = manager.get_performance("cpm")[0]
    assert cpm_row.revenue == pytest.approx(0.004)
    assert cpm_row.ctr == pytest.approx(1.0)
    assert manager.get_ad_by_id("cpm").campaign.spent_amount == pytest.approx(0.004)

    manager.track_impression("cpc")
    manager.track_impression("cpc")
    manager.track_click("cpc")
    cpc_row = manager.get_performance("cpc")[0]
    assert cpc_row.revenue == pytest.approx(0.5)
    assert cpc_row.ctr == pytest.approx(0.5)
    assert cpc_row.cpc == pytest.approx(0.5)
    assert manager.get_ad_by_id("cpc").campaign.clicks == 1


def test_tracking_unknown_ids(manager) -> None:
    manager.track_click("ghost")
    assert manager.get_performance("ghost") == []

    manager.track_impression("ghost")
    manager.track_click("ghost")
    row = manager.get_performance("ghost")[0]
    assert (row.impressions, row.clicks, row.revenue) == (1, 1, 0.0)


def test_budget_exhaustion_stops_serving(manager) -> None:
    manager.add_ad(_ad("a", campaign={"budget": 0.01}, pricing={"rate": 5.0}))
    served = 0
    while manager.get_ad(_request()) is not None:
        served += 1
        assert served < 10
    assert served == 2


def test_performance_multiplier_thresholds(manager) -> None:
    manager.add_ad(_ad("a"))
    assert manager.performance_multiplier("a") == 1.0
    for _ in range(80):
        manager.track_impression("a")
    manager.track_click("a")
    assert manager.performance_multiplier("a") == 1.2
    manager.track_click("a")
    assert manager.performance_multiplier("a") == 1.5


def test_update_and_delete(manager) -> None:
    manager.add_ad(_ad("a"))
    assert manager.update_ad("a", {"title": "Nouveau titre", "pricing": {"model": "cpc", "rate": 1}})
    updated = manager.get_ad_by_id("a")
    assert updated.title == "Nouveau titre"
    assert updated.pricing.model == "cpc"
    assert updated.updated_at == NOW
    assert not manager.update_ad("missing", {"title": "x"})

    assert manager.delete_ad("a")
    assert not manager.delete_ad("a")
    assert manager.get_ads() == []


def test_analytics_dispatch(manager) -> None:
    manager.add_ad(_ad("a"))
    manager.track_impression("a")
    assert manager.analytics("summary")["overview"]["totalImpressions"] == 1
    assert manager.analytics("revenue", ad_id="a")["revenueByModel"]["cpm"] == pytest.approx(0.002)
    with pytest.raises(ValueError):
        manager.analytics("hourly")


def test_performance_date_filter(manager) -> None:
    manager.track_impression("a")
    today = NOW.date()
    assert len(manager.get_performance(start=today, end=today)) == 1
    assert manager.get_performance(start=today + timedelta(days=1)) == []
    assert manager.get_performance(end=today - timedelta(days=1)) == []


def test_corrupt_inventory_raises_storage_error(tmp_path) -> None:
    (tmp_path / "ads.json").write_text('[{"id": "broken"}]', encoding="utf-8")
    manager = AdManager(tmp_path / "ads.json", tmp_path / "perf.json")
    with pytest.raises(StorageError):
        manager.get_ads()


def test_ad_dates_are_normalized_to_utc() -> None:
    ad = _ad("tz", startDate="2024-05-06T12:00:00+02:00", endDate=datetime(2024, 6, 1))
    assert ad.start_date == NOW
    assert ad.start_date.tzinfo == timezone.utc
    assert ad.end_date == datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert ad.created_at.tzinfo == timezone.utc
