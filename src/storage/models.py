# src/storage/models.py
# SQL models for SuperFacts
# =========================

"""
SQLAlchemy mapping used when ``storage.driver`` is ``sqlite`` or
``postgresql``. Columns mirror the article JSON record; ``position`` keeps
the store order (higher is newer) independently of publish dates.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

from src.contracts.article import DEFAULT_ARTICLE_IMAGE, ArticleModel

Base = declarative_base()


class ArticleRecord(Base):
    """One collected article."""

    __tablename__ = "articles"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, index=True)

    title = Column(String(500), nullable=False)
    summary = Column(Text, default="")
    content = Column(Text, default="")
    author = Column(String(200), default="")

    # ISO-8601 string, as exposed by the API
    publish_date = Column(String(32), nullable=False)
    category = Column(String(50), index=True)
    image_url = Column(String(1000), default=DEFAULT_ARTICLE_IMAGE)
    tags = Column(JSON, default=list)
    source_url = Column(String(1000), default="")
    source = Column(String(200), default="")

    is_hot = Column(Boolean, default=False)
    sentiment = Column(String(10))
    read_time = Column(Integer)

    collected_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (Index("idx_articles_category_position", "category", "position"),)

    @classmethod
    def from_model(cls, article: ArticleModel, position: int) -> "ArticleRecord":
        return cls(
            id=article.id,
            position=position,
            title=article.title,
            summary=article.summary,
            content=article.content,
            author=article.author,
            publish_date=article.publish_date,
            category=article.category,
            image_url=article.image_url,
            tags=list(article.tags),
            source_url=article.source_url,
            source=article.source,
            is_hot=article.is_hot,
            sentiment=article.sentiment,
            read_time=article.read_time,
        )

    def to_model(self) -> ArticleModel:
        return ArticleModel(
            id=self.id,
            title=self.title,
            summary=self.summary or "",
            content=self.content or "",
            author=self.author or "",
            publish_date=self.publish_date,
            category=self.category or "Actualités",
            image_url=self.image_url or DEFAULT_ARTICLE_IMAGE,
            tags=list(self.tags or []),
            source_url=self.source_url or "",
            source=self.source or "",
            is_hot=bool(self.is_hot),
            sentiment=self.sentiment,
            read_time=self.read_time,
        )

    def __repr__(self):
        return f"<ArticleRecord(id={self.id}, category='{self.category}', title='{self.title[:40]}...')>"
