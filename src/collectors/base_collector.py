# src/collectors/base_collector.py
# Base class for SuperFacts collectors
# ====================================

"""
Common skeleton for collectors: a per-source hook implemented by subclasses,
a batch loop that isolates failing sources, run statistics and structured
log payloads carrying the collector type and session id.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

from src.utils.logger import CollectionSessionLogger, get_logger

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from src.utils.logger import SiteLogger


class BaseCollector(ABC):
    """
    Template for collectors.

    Subclasses implement ``collect_from_source``; ``collect_from_multiple_sources``
    drives it over a source catalogue, so one broken feed never aborts a run.
    """

    def __init__(self, logger_factory: Optional["SiteLogger"] = None) -> None:
        self.collector_type = self.__class__.__name__
        self.start_time: Optional[datetime] = None
        self.stats: Dict[str, Any] = {}
        self._reset_stats()

        self.logger_factory: "SiteLogger" = logger_factory or get_logger()
        self.module_logger = self.logger_factory.create_module_logger(
            f"collectors.{self.collector_type.lower()}"
        )
        self._active_session_id: Optional[str] = None

    @abstractmethod
    def collect_from_source(
        self, source_id: str, source_config: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Collect one source.

        Returns:
            {
                'source_id': str,
                'success': bool,
                'articles_found': int,
                'articles_saved': int,
                'error_message': Optional[str],
                'processing_time': float,
                ...collector specific keys
            }
        """

    def collect_from_multiple_sources(
        self,
        sources_config: Dict[str, Dict[str, Any]],
        *,
        session_id: Optional[str] = None,
    ) -> Dict[str, Dict[str, Any]]:
        """Run ``collect_from_source`` for every source, in catalogue order."""

        self._active_session_id = session_id or uuid.uuid4().hex[:12]
        self.start_time = datetime.now(timezone.utc)
        self._reset_stats()
        session_logger = CollectionSessionLogger(self._active_session_id, self.collector_type)
        session_logger.log_session_start(len(sources_config))

        source_results: Dict[str, Dict[str, Any]] = {}
        for source_id, source_config in sources_config.items():
            try:
                source_result = self.collect_from_source(source_id, source_config)
            except Exception as exc:
                source_result = {
                    "source_id": source_id,
                    "success": False,
                    "articles_found": 0,
                    "articles_saved": 0,
                    "error_message": f"{type(exc).__name__}: {exc}",
                    "processing_time": 0.0,
                }
                self._emit_log(
                    "warning",
                    "collector.source.failed",
                    source_id=source_id,
                    details={"source": source_config.get("name"), "error": str(exc)},
                )
            self._update_global_stats(source_result)
            source_results[source_id] = source_result
            session_logger.log_source_processing(
                source_id,
                "success" if source_result.get("success") else "error",
                source_result,
            )

        end_time = datetime.now(timezone.utc)
        self.stats["processing_time_seconds"] = (end_time - self.start_time).total_seconds()
        session_logger.log_session_summary(
            {
                "sources_processed": self.stats["total_sources_processed"],
                "sources_failed": self.stats["total_errors"],
                "articles_saved": self.stats["total_articles_saved"],
                "duration_seconds": self.stats["processing_time_seconds"],
            }
        )
        self._active_session_id = None
        return source_results

    def _build_log_payload(
        self,
        event: str,
        *,
        source_id: Optional[str] = None,
        article_id: Optional[str] = None,
        latency: Optional[float] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "event": event,
            "session_id": self._active_session_id,
            "source_id": source_id,
            "article_id": article_id,
            "collector_type": self.collector_type,
            "latency": latency,
        }
        if details:
            payload["details"] = details
        return {key: value for key, value in payload.items() if value is not None}

    def _emit_log(self, level: str, event: str, **fields: Any) -> None:
        """Log a structured payload at ``level`` ('debug', 'info', 'warning', 'error')."""
        getattr(self.module_logger, level)(self._build_log_payload(event, **fields))

    def _reset_stats(self) -> None:
        self.stats = {
            "total_sources_processed": 0,
            "total_articles_found": 0,
            "total_articles_saved": 0,
            "total_errors": 0,
            "processing_time_seconds": 0.0,
        }

    def _update_global_stats(self, source_result: Dict[str, Any]) -> None:
        self.stats["total_sources_processed"] += 1
        self.stats["total_articles_found"] += source_result.get("articles_found", 0)
        self.stats["total_articles_saved"] += source_result.get("articles_saved", 0)
        if not source_result.get("success", False):
            self.stats["total_errors"] += 1

    def get_stats(self) -> Dict[str, Any]:
        return dict(self.stats)
