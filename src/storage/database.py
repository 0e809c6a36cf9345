# src/storage/database.py
# SQL article store for SuperFacts
# ================================

"""
SQL backend of the article store. ``DatabaseManager`` owns the engine and
session factory; ``SqlArticleStore`` implements the same capability
interface as the JSON document store on top of it.
"""

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import create_engine, delete, func, inspect, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from src.contracts.article import ArticleModel
from src.storage.json_document import StorageError
from src.storage.models import ArticleRecord, Base
from src.utils.logger import get_logger


class DatabaseManager:
    """
    Engine and session lifecycle for the configured SQL database.

    Args:
        database_config: flattened storage settings (``type``, ``path``,
            ``host``, ``port``, ``name``, ``user``, ``password``) as built by
            ``config.settings.storage_settings``
    """

    def __init__(self, database_config: Dict[str, Any]):
        self.config = database_config
        self.logger = get_logger().create_module_logger("storage.database")
        self.engine = None
        self.SessionLocal = None
        self._setup_database()

    def _database_url(self) -> str:
        db_type = self.config["type"]
        if db_type == "sqlite":
            db_path = self.config["path"]
            db_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{db_path}"
        if db_type == "postgresql":
            return (
                f"postgresql://{self.config['user']}:{self.config.get('password') or ''}"
                f"@{self.config['host']}:{self.config['port']}/{self.config['name']}"
            )
        raise StorageError(f"Unsupported database type: {db_type}")

    def _setup_database(self):
        url = self._database_url()
        if self.config["type"] == "sqlite":
            self.engine = create_engine(
                url,
                echo=False,
                connect_args={"check_same_thread": False, "timeout": 20},
                pool_pre_ping=True,
            )
        else:
            self.engine = create_engine(
                url, echo=False, pool_size=5, max_overflow=10, pool_pre_ping=True
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False,
        )
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot initialize database schema: {exc}") from exc
        self.logger.info(
            {"event": "storage.database.ready", "details": {"type": self.config["type"]}}
        )

    @contextmanager
    def get_session(self):
        """
        Transactional session: commits on success, rolls back and re-raises
        on error.

            with db_manager.get_session() as session:
                session.execute(select(ArticleRecord))
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as exc:
            session.rollback()
            self.logger.error(
                {"event": "storage.database.rollback", "details": {"error": str(exc)}}
            )
            raise
        finally:
            session.close()

    def get_health_status(self) -> Dict[str, Any]:
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
                count = session.scalar(select(func.count()).select_from(ArticleRecord))
            return {"status": "healthy", "type": self.config["type"], "articles": count}
        except SQLAlchemyError as exc:
            return {"status": "unhealthy", "type": self.config["type"], "error": str(exc)}


class SqlArticleStore:
    """Article store backed by the ``articles`` table."""

    def __init__(self, manager: DatabaseManager, max_articles: int = 1000):
        self.manager = manager
        self.max_articles = max_articles

    def exists(self) -> bool:
        return inspect(self.manager.engine).has_table(ArticleRecord.__tablename__)

    def load(self) -> List[ArticleModel]:
        try:
            with self.manager.get_session() as session:
                rows = session.scalars(
                    select(ArticleRecord).order_by(ArticleRecord.position.desc())
                ).all()
                return [row.to_model() for row in rows]
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot load articles: {exc}") from exc

    def find(self, article_id: str) -> Optional[ArticleModel]:
        try:
            with self.manager.get_session() as session:
                row = session.get(ArticleRecord, article_id)
                return row.to_model() if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot load article {article_id}: {exc}") from exc

    def append(self, articles: Sequence[ArticleModel]) -> int:
        try:
            with self.manager.get_session() as session:
                top = session.scalar(select(func.max(ArticleRecord.position))) or 0
                # First element of ``articles`` ends up on top
                for offset, article in enumerate(reversed(list(articles)), start=1):
                    session.merge(ArticleRecord.from_model(article, top + offset))
                session.flush()
                self._trim(session)
                return session.scalar(select(func.count()).select_from(ArticleRecord))
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot append articles: {exc}") from exc

    def replace_all(self, articles: Sequence[ArticleModel]) -> int:
        try:
            with self.manager.get_session() as session:
                session.execute(delete(ArticleRecord))
                kept = list(articles)[: self.max_articles]
                total = len(kept)
                for index, article in enumerate(kept):
                    session.merge(ArticleRecord.from_model(article, total - index))
                return total
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot rewrite articles: {exc}") from exc

    def _trim(self, session) -> None:
        cutoff = session.scalar(
            select(ArticleRecord.position)
            .order_by(ArticleRecord.position.desc())
            .offset(self.max_articles)
            .limit(1)
        )
        if cutoff is not None:
            session.execute(delete(ArticleRecord).where(ArticleRecord.position <= cutoff))
