"""
Aggregations over ad performance rows for the analytics endpoint.

Every builder takes the filtered performance rows plus the ads they refer to
and returns a camelCase dict ready to be sent as JSON. Rows whose ad was
deleted are reported under "Unknown" labels rather than dropped.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from src.contracts.ads import Advertisement, AdPerformance, AdStatus

UNKNOWN_AD = "Unknown Ad"
UNKNOWN_ADVERTISER = "Unknown Advertiser"

ANALYTICS_TYPES = ("summary", "detailed", "revenue")


def _index(ads: Iterable[Advertisement]) -> Dict[str, Advertisement]:
    return {ad.id: ad for ad in ads}


def _ctr_percent(impressions: int, clicks: int) -> float:
    return (clicks / impressions) * 100 if impressions > 0 else 0.0


def _group(rows: Sequence[AdPerformance], key_name: str, key_of) -> List[Dict[str, Any]]:
    """Sum counters per key, keeping first-seen order."""
    groups: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        key = key_of(row)
        bucket = groups.setdefault(
            key, {key_name: key, "impressions": 0, "clicks": 0, "revenue": 0.0}
        )
        bucket["impressions"] += row.impressions
        bucket["clicks"] += row.clicks
        bucket["revenue"] += row.revenue
        bucket["ctr"] = _ctr_percent(bucket["impressions"], bucket["clicks"])
    return list(groups.values())


def revenue_by_day(rows: Sequence[AdPerformance]) -> List[Dict[str, Any]]:
    totals: Dict[str, float] = {}
    for row in rows:
        day = row.date.isoformat()
        totals[day] = totals.get(day, 0.0) + row.revenue
    return [{"date": day, "revenue": revenue} for day, revenue in sorted(totals.items())]


def growth(rows: Sequence[AdPerformance], metric: str) -> float:
    """Percent change of ``metric`` between the older and newer half of the rows."""
    if len(rows) < 2:
        return 0.0
    ordered = sorted(rows, key=lambda row: row.date)
    middle = len(ordered) // 2
    first = sum(getattr(row, metric) for row in ordered[:middle])
    second = sum(getattr(row, metric) for row in ordered[middle:])
    if first <= 0:
        return 0.0
    return ((second - first) / first) * 100


def top_performing_ads(
    rows: Sequence[AdPerformance], ads: Sequence[Advertisement], limit: int = 5
) -> List[Dict[str, Any]]:
    by_id = _index(ads)
    per_ad = _group(rows, "adId", lambda row: row.ad_id)
    per_ad.sort(key=lambda item: item["revenue"], reverse=True)
    result = []
    for item in per_ad[:limit]:
        ad = by_id.get(item["adId"])
        result.append(
            {
                **item,
                "title": ad.title if ad else UNKNOWN_AD,
                "advertiser": ad.advertiser.name if ad else UNKNOWN_ADVERTISER,
            }
        )
    return result


def performance_by_placement(
    rows: Sequence[AdPerformance], ads: Sequence[Advertisement]
) -> List[Dict[str, Any]]:
    by_id = _index(ads)

    def placement_of(row: AdPerformance) -> str:
        ad = by_id.get(row.ad_id)
        return ad.placement.value if ad else "unknown"

    return _group(rows, "placement", placement_of)


def performance_by_advertiser(
    rows: Sequence[AdPerformance], ads: Sequence[Advertisement]
) -> List[Dict[str, Any]]:
    by_id = _index(ads)

    def advertiser_of(row: AdPerformance) -> str:
        ad = by_id.get(row.ad_id)
        return ad.advertiser.name if ad else "Unknown"

    return _group(rows, "advertiser", advertiser_of)


def device_targeting(ads: Sequence[Advertisement]) -> Dict[str, int]:
    """How many ads target each device; performance rows carry no device."""
    counts = {"mobile": 0, "desktop": 0, "tablet": 0}
    for ad in ads:
        for device in ad.targeting.devices:
            counts[device] += 1
    return counts


def summary_analytics(
    rows: Sequence[AdPerformance], ads: Sequence[Advertisement]
) -> Dict[str, Any]:
    total_impressions = sum(row.impressions for row in rows)
    total_clicks = sum(row.clicks for row in rows)
    total_budget = sum(ad.campaign.budget for ad in ads)
    spent_budget = sum(ad.campaign.spent_amount for ad in ads)
    return {
        "overview": {
            "totalImpressions": total_impressions,
            "totalClicks": total_clicks,
            "totalRevenue": sum(row.revenue for row in rows),
            "averageCTR": round(_ctr_percent(total_impressions, total_clicks), 2),
            "activeCampaigns": sum(1 for ad in ads if ad.status == AdStatus.ACTIVE),
            "totalBudget": total_budget,
            "spentBudget": spent_budget,
            "remainingBudget": total_budget - spent_budget,
        },
        "topPerformingAds": top_performing_ads(rows, ads),
        "revenueByDay": revenue_by_day(rows),
        "performanceMetrics": {
            "impressionGrowth": growth(rows, "impressions"),
            "clickGrowth": growth(rows, "clicks"),
            "revenueGrowth": growth(rows, "revenue"),
        },
    }


def detailed_analytics(
    rows: Sequence[AdPerformance], ads: Sequence[Advertisement]
) -> Dict[str, Any]:
    by_id = _index(ads)
    per_row = []
    for row in rows:
        ad: Optional[Advertisement] = by_id.get(row.ad_id)
        per_row.append(
            {
                **row.to_payload(),
                "adTitle": ad.title if ad else UNKNOWN_AD,
                "advertiser": ad.advertiser.name if ad else UNKNOWN_ADVERTISER,
                "placement": ad.placement.value if ad else "Unknown Placement",
                "pricing": ad.pricing.to_payload() if ad else {},
            }
        )
    return {
        "performanceByAd": per_row,
        "performanceByPlacement": performance_by_placement(rows, ads),
        "performanceByAdvertiser": performance_by_advertiser(rows, ads),
        "devicePerformance": device_targeting(ads),
    }


def revenue_analytics(
    rows: Sequence[AdPerformance], ads: Sequence[Advertisement]
) -> Dict[str, Any]:
    by_id = _index(ads)
    total_revenue = sum(row.revenue for row in rows)

    by_model = {"cpm": 0.0, "cpc": 0.0, "cpa": 0.0, "fixed": 0.0}
    for ad in ads:
        by_model[ad.pricing.model] += ad.campaign.spent_amount

    top_rows = sorted(rows, key=lambda row: row.revenue, reverse=True)[:10]
    top_earning = [
        {
            "adId": row.ad_id,
            "title": by_id[row.ad_id].title if row.ad_id in by_id else UNKNOWN_AD,
            "revenue": row.revenue,
            "impressions": row.impressions,
            "clicks": row.clicks,
            "ctr": row.ctr,
        }
        for row in top_rows
    ]

    daily = total_revenue / max(1, len(rows))
    share = [
        {
            "advertiser": item["advertiser"],
            "revenue": item["revenue"],
            "percentage": (item["revenue"] / total_revenue) * 100 if total_revenue > 0 else 0.0,
        }
        for item in performance_by_advertiser(rows, ads)
    ]
    return {
        "totalRevenue": total_revenue,
        "revenueByModel": by_model,
        "topEarningAds": top_earning,
        "revenueByDay": revenue_by_day(rows),
        "projectedRevenue": {
            "daily": daily,
            "weekly": daily * 7,
            "monthly": daily * 30,
            "yearly": daily * 365,
        },
        "revenueShare": share,
    }


BUILDERS = {
    "summary": summary_analytics,
    "detailed": detailed_analytics,
    "revenue": revenue_analytics,
}


__all__ = [
    "ANALYTICS_TYPES",
    "BUILDERS",
    "detailed_analytics",
    "revenue_analytics",
    "summary_analytics",
]
