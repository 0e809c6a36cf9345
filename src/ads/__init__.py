"""
Ads package: inventory, serving, tracking and analytics.
"""

from .analytics import ANALYTICS_TYPES
from .manager import AdManager
from .samples import build_sample_ads

__all__ = ["ANALYTICS_TYPES", "AdManager", "build_sample_ads"]
