# src/utils/logger.py
# Logging setup for SuperFacts
# ============================

"""
Central loguru configuration shared by the API, the collector and the CLI.

A single ``SiteLogger`` installs the console and rotating file handlers once
per process; components obtain a bound logger through
``get_logger().create_module_logger("collectors.news")`` and emit structured
payloads such as ``{"event": "collector.source.failed", "details": {...}}``.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from config.settings import DEBUG, LOGGING_CONFIG


class SiteLogger:
    """
    Process-wide logging configurator.

    Handlers are installed on first use; later calls to
    ``configure_logging`` are ignored unless ``force`` is set, so importing
    modules in any order yields the same sinks.
    """

    def __init__(self):
        self.is_configured = False
        self.log_file_path: Optional[Path] = None

    def configure_logging(self, config: Optional[Dict[str, Any]] = None, *, force: bool = False):
        """
        Install console and file handlers.

        Args:
            config: logging settings; defaults to ``LOGGING_CONFIG`` from
                config/settings.py
            force: reinstall handlers even if already configured
        """
        if self.is_configured and not force:
            logger.debug("Logger already configured, skipping")
            return

        config = config or LOGGING_CONFIG

        logger.remove()
        self._configure_console_handler(config)
        if config.get("file_path"):
            self._configure_file_handler(config)

        self.is_configured = True
        logger.debug(f"Logging configured: {config}")

    def _configure_console_handler(self, config: Dict[str, Any]):
        if DEBUG:
            console_format = (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[module]}</cyan> | "
                "<level>{message}</level>"
            )
            console_level = "DEBUG"
        else:
            console_format = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]} | {message}"
            console_level = config.get("level", "INFO")

        logger.configure(extra={"module": "superfacts"})
        logger.add(
            sys.stdout,
            format=console_format,
            level=console_level,
            colorize=True,
            backtrace=DEBUG,
            diagnose=DEBUG,
        )

    def _configure_file_handler(self, config: Dict[str, Any]):
        """Rotating, compressed file sink with full tracebacks."""
        self.log_file_path = Path(config["file_path"])
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{process.id: <6} | "
            "{extra[module]} | "
            "{name}:{function}:{line} | "
            "{message}"
        )

        logger.add(
            str(self.log_file_path),
            format=file_format,
            level=config.get("level", "INFO"),
            rotation=config.get("max_file_size", "10 MB"),
            retention=config.get("retention", "30 days"),
            compression="gz",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )

    def create_module_logger(self, module_name: str) -> Any:
        """
        Return a logger bound to ``module_name`` (e.g. ``'ads.manager'``).
        """
        if not self.is_configured:
            self.configure_logging()
        return logger.bind(module=module_name)

    def log_system_startup(self, version: str, config_summary: Optional[Dict[str, Any]] = None):
        """Write a startup banner with the main settings."""
        logger.info("=" * 60)
        logger.info(f"SUPERFACTS {version} STARTED")
        logger.info("=" * 60)
        logger.info(f"Debug mode: {DEBUG}")

        if config_summary:
            for key, value in config_summary.items():
                logger.info(f"  {key}: {value}")

        if self.log_file_path:
            logger.info(f"Log file: {self.log_file_path}")


class CollectionSessionLogger:
    """
    Per-run logger for news collection.

    Binds a session id so every line of one run can be grepped together.
    """

    def __init__(self, session_id: str, collector_type: str):
        self.session_id = session_id
        self.collector_type = collector_type
        self.logger = logger.bind(
            module="collectors.session",
            session_id=session_id,
            collector_type=collector_type,
        )

    def log_session_start(self, sources_count: int):
        self.logger.info(f"Collection session started: {sources_count} sources scheduled")

    def log_source_processing(self, source_id: str, status: str, stats: Optional[Dict[str, Any]] = None):
        stats = stats or {}
        if status == "success":
            self.logger.info(
                f"{source_id}: {stats.get('articles_saved', 0)}/"
                f"{stats.get('articles_found', 0)} articles kept"
            )
        elif status == "error":
            self.logger.warning(f"{source_id}: {stats.get('error_message', 'unknown error')}")
        else:
            self.logger.info(f"{source_id}: {status}")

    def log_session_summary(self, summary: Dict[str, Any]):
        self.logger.info(
            "Collection session finished: "
            f"sources={summary.get('sources_processed', 0)} "
            f"failed={summary.get('sources_failed', 0)} "
            f"new={summary.get('articles_saved', 0)} "
            f"total={summary.get('total_articles', 0)} "
            f"duration={summary.get('duration_seconds', 0):.1f}s"
        )


_logger_instance: Optional[SiteLogger] = None


def get_logger() -> SiteLogger:
    """Return the process-wide ``SiteLogger``, configuring it on first call."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = SiteLogger()
        _logger_instance.configure_logging()
    return _logger_instance


def setup_logging(config: Optional[Dict[str, Any]] = None) -> SiteLogger:
    """Configure logging at process start, optionally with explicit settings."""
    logger_instance = get_logger()
    if config:
        logger_instance.configure_logging(config, force=True)
    return logger_instance
