"""
Collectors package: the RSS news collector and its text classifiers.
"""

from .base_collector import BaseCollector
from .news_collector import CollectionResult, FrenchNewsCollector

__all__ = [
    "BaseCollector",
    "CollectionResult",
    "FrenchNewsCollector",
]
