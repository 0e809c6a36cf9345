"""Contracts for article records shared by the store, collector and API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.utils.datetime_utils import parse_iso, to_iso_z

DEFAULT_ARTICLE_IMAGE = "/images/default-article.svg"

Sentiment = Literal["positive", "negative", "neutral"]


class ArticlePayload(TypedDict, total=False):
    """Serialized article as stored in ``articles.json`` and returned by the API."""

    id: str
    title: str
    summary: str
    content: str
    author: str
    publishDate: str
    category: str
    imageUrl: str
    tags: List[str]
    sourceUrl: str
    source: str
    isHot: bool
    sentiment: Sentiment
    readTime: int


class ArticleModel(BaseModel):
    """Validated article record.

    Attributes are snake_case; the persisted and public form uses camelCase
    keys (``publishDate``, ``imageUrl``...). Unknown keys found in stored
    documents are preserved.
    """

    id: str = Field(min_length=1)
    title: str
    summary: str = ""
    content: str = ""
    author: str = ""
    publish_date: str
    category: str = "Actualités"
    image_url: str = DEFAULT_ARTICLE_IMAGE
    tags: List[str] = Field(default_factory=list)
    source_url: str = ""
    source: str = ""
    is_hot: bool = False
    sentiment: Optional[Sentiment] = None
    read_time: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> str:
        # Older documents stored numeric ids
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("publish_date", mode="before")
    @classmethod
    def normalize_publish_date(cls, value: Any) -> str:
        if isinstance(value, datetime):
            return to_iso_z(value)
        if not value:
            raise ValueError("publishDate is required")
        try:
            return to_iso_z(parse_iso(str(value)))
        except (ValueError, OverflowError) as exc:
            raise ValueError(f"publishDate is not a valid timestamp: {value!r}") from exc

    @property
    def published_at(self) -> datetime:
        return parse_iso(self.publish_date)

    def to_payload(self) -> Dict[str, Any]:
        """camelCase dict ready for JSON output."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["ArticleModel", "ArticlePayload", "DEFAULT_ARTICLE_IMAGE", "Sentiment"]
