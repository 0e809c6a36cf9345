"""Project configuration facade backed by superfacts.config_manager."""
from __future__ import annotations

from typing import Any, Dict

from superfacts.config_manager import Config, ConfigError, load_config

CONFIG: Config = load_config()

DATA_DIR = CONFIG.paths.data_dir
LOGS_DIR = CONFIG.paths.logs_dir

for directory in (DATA_DIR, LOGS_DIR):
    directory.mkdir(parents=True, exist_ok=True)

ENVIRONMENT = CONFIG.app.environment
DEBUG = CONFIG.app.debug
IS_PRODUCTION = ENVIRONMENT == "production"
TIMEZONE = CONFIG.app.timezone


def storage_settings(config: Config) -> Dict[str, Any]:
    """Flatten storage settings, resolving document names against data_dir."""

    data = config.storage.model_dump(mode="python")
    data_dir = config.paths.data_dir
    data["type"] = data.pop("driver")
    data["articles_path"] = data_dir / data["articles_file"]
    data["ads_path"] = data_dir / data["ads_file"]
    data["performance_path"] = data_dir / data["performance_file"]
    return data


def logging_settings(config: Config) -> Dict[str, Any]:
    """Logging settings in the shape expected by SiteLogger."""

    return {
        "level": config.logging.level,
        "file_path": str(config.logging.file_path),
        "max_file_size": f"{config.logging.max_file_size_mb} MB",
        "retention": f"{config.logging.retention_days} days",
    }


LOGGING_CONFIG: Dict[str, Any] = logging_settings(CONFIG)


def validate_config(config: Config | None = None) -> None:
    """Execute domain specific consistency checks."""

    cfg = config or CONFIG
    if cfg.news.hot_limit > cfg.storage.max_articles:
        raise ConfigError("news.hot_limit cannot exceed storage.max_articles")
    if cfg.seo.sitemap_article_limit > cfg.storage.max_articles:
        raise ConfigError("seo.sitemap_article_limit cannot exceed storage.max_articles")
    names = {
        cfg.storage.articles_file,
        cfg.storage.ads_file,
        cfg.storage.performance_file,
    }
    if len(names) != 3:
        raise ConfigError("storage documents must use distinct file names")
    if not cfg.server.api_prefix.startswith("/"):
        raise ConfigError("server.api_prefix must start with '/'")


__all__ = [
    "CONFIG",
    "DATA_DIR",
    "LOGS_DIR",
    "ENVIRONMENT",
    "DEBUG",
    "IS_PRODUCTION",
    "TIMEZONE",
    "LOGGING_CONFIG",
    "logging_settings",
    "storage_settings",
    "validate_config",
]
