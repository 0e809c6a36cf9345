"""Declarative configuration schema for SuperFacts."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    PrivateAttr,
    field_validator,
    model_validator,
)


class SchemaError(ValueError):
    """Raised when the configuration schema definition is invalid."""


class StrictModel(BaseModel):
    """Base model enforcing strict validation rules."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )


class AppSettings(StrictModel):
    """Top-level runtime metadata."""

    environment: str = Field(
        default="development",
        description="Normalized deployment environment name.",
        examples=["production"],
    )
    debug: bool = Field(
        default=False,
        description="When true, enables verbose logging and relaxed guards.",
    )
    timezone: str = Field(
        default="Europe/Paris",
        description="Site timezone used for ad day-parting and display.",
        examples=["UTC"],
    )

    @field_validator("environment")
    @classmethod
    def _normalize_environment(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"development", "production", "staging", "test"}:
            raise ValueError(
                "environment must be one of: development, staging, production, test"
            )
        return normalized


class PathsConfig(StrictModel):
    """Filesystem layout settings."""

    data_dir: Path = Field(
        default=Path("data"),
        description="Root directory for the article and ad documents.",
        examples=["/var/lib/superfacts"],
    )
    logs_dir: Path = Field(
        default=Path("logs"),
        description="Directory where operational logs are written.",
        examples=["/var/log/superfacts"],
    )

    @model_validator(mode="after")
    def _ensure_child_paths(self) -> "PathsConfig":
        base = self.data_dir if self.data_dir.is_absolute() else self.data_dir.resolve()
        object.__setattr__(self, "data_dir", base)
        if not self.logs_dir.is_absolute():
            object.__setattr__(self, "logs_dir", (base / self.logs_dir).resolve())
        return self


class StorageConfig(StrictModel):
    """Article, ad and performance persistence."""

    driver: str = Field(
        default="json",
        description="Article store backend: json document or SQL database.",
        examples=["sqlite"],
    )
    articles_file: str = Field(
        default="articles.json",
        description="Article document name, relative to paths.data_dir.",
    )
    ads_file: str = Field(
        default="ads.json",
        description="Ad inventory document name, relative to paths.data_dir.",
    )
    performance_file: str = Field(
        default="ad-performance.json",
        description="Daily ad performance document, relative to paths.data_dir.",
    )
    path: Optional[Path] = Field(
        default=Path("data/articles.db"),
        description="Filesystem path for SQLite database files.",
    )
    host: Optional[str] = Field(
        default=None,
        description="Hostname for the SQL server when using postgresql.",
        examples=["db.internal"],
    )
    port: Optional[int] = Field(
        default=None,
        description="TCP port for the SQL server backend.",
        examples=[5432],
    )
    name: str = Field(default="superfacts", description="Database name.")
    user: Optional[str] = Field(
        default=None,
        description="Database username for authenticated connections.",
    )
    password: Optional[str] = Field(
        default=None,
        description="Database password; treated as secret.",
    )
    max_articles: PositiveInt = Field(
        default=1_000,
        description="Articles kept in the store; the oldest are dropped first.",
    )

    @field_validator("port", mode="before")
    @classmethod
    def _blank_port(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @model_validator(mode="after")
    def _validate_backend(self) -> "StorageConfig":
        driver = self.driver.lower()
        if driver not in {"json", "sqlite", "postgresql"}:
            raise ValueError("driver must be one of: json, sqlite, postgresql")
        if driver == "sqlite" and not self.path:
            raise ValueError("SQLite configuration requires a file path")
        if driver == "postgresql":
            missing = [
                field_name
                for field_name in ("host", "port", "user")
                if getattr(self, field_name) in (None, "")
            ]
            if missing:
                raise ValueError(
                    "PostgreSQL configuration requires fields: " + ", ".join(missing)
                )
        object.__setattr__(self, "driver", driver)
        return self


class CollectionConfig(StrictModel):
    """News collection behaviour parameters."""

    items_per_source: PositiveInt = Field(
        default=8,
        description="Feed entries considered per source on each run.",
    )
    request_timeout_seconds: PositiveInt = Field(
        default=15,
        description="HTTP request timeout used when fetching feeds.",
    )
    user_agent: str = Field(
        default="SuperFactsBot/1.0 (+https://superfacts.fr)",
        description="HTTP User-Agent header sent to providers.",
    )
    duplicate_similarity_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Title similarity above which an entry counts as a duplicate.",
    )
    summary_max_chars: PositiveInt = Field(
        default=300,
        description="Summary length before truncation with an ellipsis.",
    )
    words_per_minute: PositiveInt = Field(
        default=200,
        description="Reading speed used to estimate article read time.",
    )
    max_tags: PositiveInt = Field(
        default=6, description="Maximum tags attached to an article."
    )
    default_image: str = Field(
        default="/images/default-article.svg",
        description="Image used when a feed entry carries none.",
    )


class NewsConfig(StrictModel):
    """Listing and hot-news parameters for the news API."""

    default_limit: PositiveInt = Field(
        default=1_000,
        description="Page size used when the request omits limit.",
    )
    hot_limit: PositiveInt = Field(
        default=20,
        description="Default number of hot articles returned by the collector.",
    )
    hot_window_hours: PositiveInt = Field(
        default=24,
        description="Articles published within this window count as hot.",
    )


class SeoConfig(StrictModel):
    """Site identity and feed publication settings."""

    site_name: str = Field(default="SuperFacts.fr")
    site_url: str = Field(
        default="https://superfacts.fr",
        description="Absolute base URL used in feeds and sitemaps.",
    )
    default_image: str = Field(default="https://superfacts.fr/og-default-image.jpg")
    twitter_handle: Optional[str] = Field(default="@SuperFactsFR")
    organization_name: str = Field(default="SuperFacts")
    organization_logo: str = Field(default="https://superfacts.fr/logo-200x60.png")
    same_as: List[str] = Field(
        default_factory=lambda: [
            "https://twitter.com/SuperFactsFR",
            "https://facebook.com/SuperFactsFR",
        ]
    )
    rss_max_items: PositiveInt = Field(
        default=50, description="Items rendered in the RSS feed."
    )
    rss_cache_seconds: NonNegativeInt = Field(default=1_800)
    sitemap_cache_seconds: NonNegativeInt = Field(default=3_600)
    sitemap_article_limit: PositiveInt = Field(
        default=50,
        description="Article entries in the structured sitemap.",
    )
    sitemap_xml_article_limit: PositiveInt = Field(
        default=1_000,
        description="Article entries in sitemap.xml.",
    )

    @field_validator("site_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith("http"):
            raise ValueError("site_url must be an absolute http(s) URL")
        return value.rstrip("/")


class AdsConfig(StrictModel):
    """Ad serving parameters."""

    sidebar_refresh_seconds: PositiveInt = Field(
        default=30,
        description="refreshAfter hint returned for sidebar placements.",
    )
    tracking_path: str = Field(
        default="/api/ads/track",
        description="Path prefix used to build tracking URLs.",
    )


class ServerConfig(StrictModel):
    """HTTP server binding."""

    host: str = Field(default="0.0.0.0")
    port: PositiveInt = Field(default=8000)
    api_prefix: str = Field(default="/api")


class LoggingConfig(StrictModel):
    """Logging subsystem configuration."""

    level: str = Field(
        default="INFO",
        description="Minimum log level captured by the site logger.",
        examples=["DEBUG"],
    )
    file_path: Path = Field(
        default=Path("data/logs/superfacts.log"),
        description="Path of the rotating log file.",
    )
    max_file_size_mb: PositiveInt = Field(
        default=10,
        description="Maximum size per log file before rotation (MiB).",
    )
    retention_days: PositiveInt = Field(
        default=30,
        description="Number of days to keep rotated log files.",
    )

    @model_validator(mode="after")
    def _resolve_path(self) -> "LoggingConfig":
        if not self.file_path.is_absolute():
            self.file_path = self.file_path.resolve()
        return self


class Config(StrictModel):
    """Complete SuperFacts configuration model."""

    app: AppSettings = Field(default_factory=AppSettings)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    collection: CollectionConfig = Field(default_factory=CollectionConfig)
    news: NewsConfig = Field(default_factory=NewsConfig)
    seo: SeoConfig = Field(default_factory=SeoConfig)
    ads: AdsConfig = Field(default_factory=AdsConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    _metadata: object = PrivateAttr(default=None)


DEFAULT_CONFIG = Config()


def iter_field_docs(
    model: BaseModel | type[BaseModel],
    prefix: str = "",
    *,
    include_defaults: bool = True,
) -> Iterable[dict[str, object]]:
    """Yield flattened schema documentation entries."""

    instance = DEFAULT_CONFIG if isinstance(model, type) else model
    target_model = type(instance) if not isinstance(model, type) else model

    for name, field in target_model.model_fields.items():
        value = getattr(instance, name, field.default)
        key = f"{prefix}{name}" if not prefix else f"{prefix}.{name}"
        is_nested = isinstance(value, BaseModel)
        entry: dict[str, object] = {
            "name": key,
            "type": getattr(field.annotation, "__name__", str(field.annotation)),
            "description": field.description or "",
            "default": None if (is_nested or not include_defaults) else value,
            "examples": field.examples or [],
            "constraints": _describe_constraints(field),
            "is_nested": is_nested,
        }
        yield entry
        if is_nested:
            yield from iter_field_docs(value, key)


def _describe_constraints(field: Any) -> str:
    """Return a human readable description of field constraints."""

    parts: list[str] = []
    for meta in getattr(field, "metadata", []):
        for attr, comparator in (("ge", ">="), ("gt", ">"), ("le", "<="), ("lt", "<")):
            bound = getattr(meta, attr, None)
            if bound is not None:
                parts.append(f"{comparator} {bound}")
    return ", ".join(parts)


__all__ = [
    "Config",
    "DEFAULT_CONFIG",
    "SchemaError",
    "iter_field_docs",
]
